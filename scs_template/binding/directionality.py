"""Publish/subscribe inversion between client and provider views.

The document describes the API from the wire's point of view.  In the
default client view the channel's ``publish`` operation is what the
generated code publishes; in the provider view the roles swap.
"""
from __future__ import annotations

from scs_template.shared.constants import DEFAULT_VIEW, PROVIDER_VIEW, X_VIEW
from scs_template.shared.models.asyncapi import AsyncAPIDocument, Channel, Operation
from scs_template.shared.models.params import GenerationParams


def is_provider_view(
    params: GenerationParams,
    document: AsyncAPIDocument | None = None,
) -> bool:
    """True when generating from the provider's point of view.

    The ``view`` parameter wins; otherwise the document's ``info.x-view``
    extension is consulted.
    """
    view = params.view
    if view is None and document is not None:
        view = document.info_extension(X_VIEW)
    return (view or DEFAULT_VIEW) == PROVIDER_VIEW


def real_publisher(
    channel: Channel,
    params: GenerationParams,
    document: AsyncAPIDocument | None = None,
) -> Operation | None:
    """Return the operation the generated code publishes on *channel*."""
    if is_provider_view(params, document):
        return channel.subscribe
    return channel.publish


def real_subscriber(
    channel: Channel,
    params: GenerationParams,
    document: AsyncAPIDocument | None = None,
) -> Operation | None:
    """Return the operation the generated code subscribes to on *channel*."""
    if is_provider_view(params, document):
        return channel.publish
    return channel.subscribe
