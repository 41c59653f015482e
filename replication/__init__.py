"""
Section replication and binding.

    MutationContext    : worksheet + layout + located block for one run
    replicate_sections : clear overflow, clone and bind one section per record
    bind_section       : exact-match placeholder substitution
"""

from replication.context import MutationContext
from replication.binder import bind_section
from replication.replicator import (
    BlockSnapshot,
    clear_overflow,
    clone_block,
    replicate_sections,
    snapshot_block,
    strip_strikethrough,
)

__all__ = [
    "BlockSnapshot",
    "MutationContext",
    "bind_section",
    "clear_overflow",
    "clone_block",
    "replicate_sections",
    "snapshot_block",
    "strip_strikethrough",
]
