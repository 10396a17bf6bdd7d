"""
Post-processing applied to each source's items before merging.

A transform is a pure function ``(context, items) -> items``. The aggregator
runs the configured pipeline once per source, in order, whether the items
came from the channel cache or from a fresh adapter call.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from src.platforms.schemas import StreamItem
from src.sources.schemas import Source


@dataclass(frozen=True)
class TransformContext:
    """What a transform may know about the items it receives."""

    source: Source


Transform = Callable[[TransformContext, list[StreamItem]], list[StreamItem]]


def stamp_source(context: TransformContext, items: list[StreamItem]) -> list[StreamItem]:
    """Attach the owning source id to every item."""
    return [item.model_copy(update={"source_id": context.source.id}) for item in items]


def fill_channel_name(context: TransformContext, items: list[StreamItem]) -> list[StreamItem]:
    """Use the source's display name where the platform gave no channel name."""
    name = context.source.display_name
    if not name:
        return items
    return [
        item if item.channel_name else item.model_copy(update={"channel_name": name})
        for item in items
    ]


DEFAULT_TRANSFORMS: tuple[Transform, ...] = (stamp_source, fill_channel_name)


def apply_transforms(
    context: TransformContext,
    items: list[StreamItem],
    transforms: Sequence[Transform] = DEFAULT_TRANSFORMS,
) -> list[StreamItem]:
    for transform in transforms:
        items = transform(context, items)
    return items
