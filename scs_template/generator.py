"""Generation run orchestration.

A run parses the document (unless one is passed in), validates the
generation parameters, resolves the function specs, and renders the
configuration outputs.  The schema name cache is reset when the run ends,
whether it succeeded or not.

Each run (re)configures JSON logging on the ``scs_template`` logger at the
level given by ``LOG_LEVEL``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from scs_template.app_config.application_yaml import function_definitions, render_application_yaml
from scs_template.binding.function_specs import build_function_specs
from scs_template.binding.schema_names import ModelInfo, SchemaNameCache, describe_models
from scs_template.document.parser import parse_document
from scs_template.shared.config import GeneratorSettings
from scs_template.shared.constants import PACKAGE_LOGGER
from scs_template.shared.logging import end_run, setup_logging, start_run
from scs_template.shared.models.asyncapi import AsyncAPIDocument
from scs_template.shared.models.functions import FunctionSpec
from scs_template.shared.models.params import GenerationParams

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Everything a rendering stage needs from one generation run."""

    function_specs: dict[str, FunctionSpec] = field(default_factory=dict)
    function_definitions: str = ""
    application_yaml: str = ""
    models: list[ModelInfo] = field(default_factory=list)


def resolve_params(
    params: GenerationParams | dict[str, Any] | None,
    settings: GeneratorSettings | None = None,
) -> GenerationParams:
    """Validate raw template parameters, filling gaps from the environment.

    Raises:
        UnsupportedBinderError: If ``binder`` is not kafka, rabbit or solace.
        pydantic.ValidationError: For any other invalid option.
    """
    if isinstance(params, GenerationParams):
        return params
    raw = dict(params or {})
    settings = settings or GeneratorSettings()
    raw.setdefault("binder", settings.default_binder)
    if settings.default_view is not None:
        raw.setdefault("view", settings.default_view)
    return GenerationParams.model_validate(raw)


def generate(
    raw_or_document: AsyncAPIDocument | dict[str, Any],
    params: GenerationParams | dict[str, Any] | None = None,
    cache: SchemaNameCache | None = None,
) -> GenerationResult:
    """Run one generation pass.

    Args:
        raw_or_document: A parsed :class:`AsyncAPIDocument` or the raw dict
            loaded from YAML/JSON.
        params: Template parameters, as a model or a dict of camelCase
            options.
        cache: Schema name cache to use; a private one is created when
            omitted.  It is reset when the run ends.

    Returns:
        The resolved function specs and rendered configuration.

    Raises:
        GenerationError: Any subclass; the run produces no output.
    """
    cache = cache if cache is not None else SchemaNameCache()
    settings = GeneratorSettings()
    setup_logging(PACKAGE_LOGGER, settings.log_level)
    token = start_run()
    try:
        generation_params = resolve_params(params, settings)
        if isinstance(raw_or_document, AsyncAPIDocument):
            document = raw_or_document
        else:
            document = parse_document(raw_or_document)

        logger.info(
            "Generating for '%s' v%s (binder=%s, view=%s)",
            document.title,
            document.version,
            generation_params.binder,
            generation_params.view or "document default",
        )
        specs = build_function_specs(document, generation_params, cache)
        result = GenerationResult(
            function_specs=specs,
            function_definitions=function_definitions(specs),
            application_yaml=render_application_yaml(document, generation_params, specs),
            models=describe_models(document, cache),
        )
        logger.info(
            "Generation finished: %d functions, %d models.",
            len(result.function_specs),
            len(result.models),
        )
        return result
    except Exception:
        logger.exception("Generation failed.")
        raise
    finally:
        cache.reset()
        end_run(token)
