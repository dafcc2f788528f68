"""Configuration loading and defaults for ffstack.

Main components:
- loader.ConfigLoader: Locate, parse and validate the stack configuration
- env_loader: Environment variable substitution (${VAR_NAME} pattern)
- validator: Human-readable validation messages
- defaults: Option defaults and fixed constants
"""
