# rbstraverse/config.py

import os
import tomllib

CONFIG_FILENAME = ".rbstraverse.toml"

DEFAULTS = {
    "source_dirs": ["app", "lib"],
    "signature_paths": ["sig"],
    "output_dir": "sig/activesupport",
    "exclude": [],
    "max_workers": None,
}

LIST_KEYS = ("source_dirs", "signature_paths", "exclude")


def read_config_file(root_dir: str) -> dict:
    path = os.path.join(root_dir, CONFIG_FILENAME)
    if not os.path.isfile(path):
        return {}
    with open(path, "rb") as f:
        data = tomllib.load(f)
    # either a [rbstraverse] table or plain top-level keys
    return dict(data.get("rbstraverse", data))


def read_environment() -> dict:
    values = {}
    sig_paths = os.environ.get("RBSTRAVERSE_SIGNATURE_PATHS")
    if sig_paths:
        values["signature_paths"] = [p for p in sig_paths.split(os.pathsep) if p]
    output_dir = os.environ.get("RBSTRAVERSE_OUTPUT_DIR")
    if output_dir:
        values["output_dir"] = output_dir
    return values


def load_config(root_dir: str, overrides: dict = None) -> dict:
    """
    Settings for one run, lowest precedence first: defaults, the project's
    .rbstraverse.toml, RBSTRAVERSE_* environment variables, explicit overrides.
    Relative paths are resolved against root_dir.
    """
    config = {k: (list(v) if isinstance(v, list) else v) for k, v in DEFAULTS.items()}
    for layer in (read_config_file(root_dir), read_environment(), overrides or {}):
        unknown = set(layer) - set(DEFAULTS)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")
        for key, value in layer.items():
            if value is None:
                continue
            if key in LIST_KEYS and isinstance(value, str):
                value = [value]
            config[key] = value

    if config["max_workers"] is not None:
        config["max_workers"] = int(config["max_workers"])
    config["root_dir"] = os.path.abspath(root_dir)
    config["source_dirs"] = [_absolute(root_dir, p) for p in config["source_dirs"]]
    config["signature_paths"] = [_absolute(root_dir, p) for p in config["signature_paths"]]
    config["output_dir"] = _absolute(root_dir, config["output_dir"])
    return config


def _absolute(root_dir: str, path: str) -> str:
    return os.path.abspath(path if os.path.isabs(path) else os.path.join(root_dir, path))
