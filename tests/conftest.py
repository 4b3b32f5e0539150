import logging
import os
import pathlib
import sys

import pytest


# Ensure repo root is on PYTHONPATH for direct package imports (e.g. `import metamodel`).
_REPO_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from metamodel.config import ConfigManager  # noqa: E402
from metamodel.model import Model  # noqa: E402
from metamodel.observability import ROOT_LOGGER  # noqa: E402


SCENARIO_YAML = """\
name: scenario
objects: ["$allow", "$token"]
places:
  - {label: "$owner", initial: [0, 1100], capacity: [0, 0]}
  - {label: "$recipient", initial: [0, 0], capacity: [0, 0]}
transitions:
  - {label: transfer}
arrows:
  - {source: "$owner", target: transfer, weight: 10, object: "$token"}
  - {source: transfer, target: "$recipient", weight: 10, object: "$token"}
"""


def build_scenario_model() -> Model:
    """Two places, one transition, two token-weighted arrows."""
    model = Model("scenario")
    model.add_objects(["$allow", "$token"])
    model.add_place("$owner", [0, 1100], [0, 0], 0, 0, b"")
    model.add_place("$recipient", [0, 0], [0, 0], 0, 0, b"")
    model.add_transition("transfer", 0, 0, 1, b"")
    model.add_arrow("$owner", "transfer", 10, "$token", False, b"")
    model.add_arrow("transfer", "$recipient", 10, "$token", False, b"")
    return model


@pytest.fixture
def scenario_model() -> Model:
    return build_scenario_model()


@pytest.fixture
def scenario_yaml(tmp_path: pathlib.Path) -> pathlib.Path:
    p = tmp_path / "scenario.yaml"
    p.write_text(SCENARIO_YAML, encoding="utf-8")
    return p


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch):
    for name in list(os.environ):
        if name.startswith("METAMODEL_"):
            monkeypatch.delenv(name, raising=False)
    ConfigManager().reset()
    yield
    ConfigManager().reset()


@pytest.fixture(autouse=True)
def _isolated_logging():
    logger = logging.getLogger(ROOT_LOGGER)
    level = logger.level
    yield
    for handler in list(logger.handlers):
        if getattr(handler, "_metamodel_handler", False):
            logger.removeHandler(handler)
    logger.setLevel(level)
