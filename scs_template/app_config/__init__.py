"""Application configuration output."""

from scs_template.app_config.application_yaml import app_properties, render_application_yaml

__all__ = ["app_properties", "render_application_yaml"]
