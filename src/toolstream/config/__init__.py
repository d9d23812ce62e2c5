"""
toolstream configuration utilities.

Usage:
    from toolstream.config import load_config

    config = load_config()
    phase = turn_phase(events, stream_open=True, options=config.classifier_options())
"""

from toolstream.config.loader import (
    CONFIG_FILE_NAME,
    ToolstreamConfig,
    get_config_path,
    load_config,
)

__all__ = ["load_config", "get_config_path", "ToolstreamConfig", "CONFIG_FILE_NAME"]
