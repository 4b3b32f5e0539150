"""Token model: the fixed model instance behind a fungible token.

``build_token_model`` replays one ordered script of registry calls that
describes token semantics as a net over two objects, ``$allow`` (allowance
units) and ``$token`` (balance units):

- transfer: owner -> recipient
- approve / zeroApproval: two-phase approval; approve is inhibited while an
  allowance is outstanding, so it must be zeroed out first
- transferFrom: transfer that also consumes allowance
- spendAllowance: allowance spend that drains owner balance to the spender
- mint: guarded by an inhibit arc from ``$paused``, consumes headroom under
  ``$cap``, credits owner and supply
- burn: debits owner and supply, accounts the amount in ``$burned``

The script is data. Labels, literal arguments and above all arrow order are
part of the identity: editing any of them yields a different identifier.

``ModelToken`` is the collaborator seam for the accounting side: it builds
the model once, caches its identifier and exposes both read-only.
"""

from __future__ import annotations

from typing import Tuple

from metamodel.model import Model
from metamodel.observability import ModelLayer, ModelLogger

_log = ModelLogger(__name__, ModelLayer.BUILDER)
_token_log = ModelLogger(__name__, ModelLayer.TOKEN)

TOKEN_MODEL_NAME = "token"

ALLOW = "$allow"
TOKEN = "$token"

TOKEN_OBJECTS: Tuple[str, ...] = (ALLOW, TOKEN)

INITIAL_SUPPLY = 1100
SUPPLY_CAP = 100000

# (label, initial, capacity, x, y)
TOKEN_PLACES: Tuple[Tuple[str, Tuple[int, int], Tuple[int, int], int, int], ...] = (
    ("$owner", (0, INITIAL_SUPPLY), (0, 0), 120, 220),
    ("$recipient", (0, 0), (0, 0), 520, 220),
    ("$spender", (0, 0), (0, 0), 520, 420),
    ("$allowance", (0, 0), (0, 0), 320, 420),
    ("$supply", (0, INITIAL_SUPPLY), (0, SUPPLY_CAP), 320, 40),
    ("$cap", (0, SUPPLY_CAP - INITIAL_SUPPLY), (0, 0), 120, 40),
    ("$paused", (0, 0), (0, 1), 520, 40),
    ("$burned", (0, 0), (0, 0), 120, 420),
)

# (label, x, y, rate)
TOKEN_TRANSITIONS: Tuple[Tuple[str, int, int, int], ...] = (
    ("transfer", 320, 220, 1),
    ("approve", 220, 340, 1),
    ("zeroApproval", 420, 340, 1),
    ("transferFrom", 420, 300, 1),
    ("spendAllowance", 420, 500, 1),
    ("mint", 220, 120, 1),
    ("burn", 220, 320, 1),
)

# (source, target, weight, object, inhibit)
TOKEN_ARROWS: Tuple[Tuple[str, str, int, str, bool], ...] = (
    # transfer
    ("$owner", "transfer", 1, TOKEN, False),
    ("transfer", "$recipient", 1, TOKEN, False),
    # approve, then zero out before approving again
    ("$allowance", "approve", 1, ALLOW, True),
    ("approve", "$allowance", 1, ALLOW, False),
    ("$allowance", "zeroApproval", 1, ALLOW, False),
    # transfer with allowance
    ("$allowance", "transferFrom", 1, ALLOW, False),
    ("$owner", "transferFrom", 1, TOKEN, False),
    ("transferFrom", "$recipient", 1, TOKEN, False),
    # spend allowance and drain
    ("$allowance", "spendAllowance", 1, ALLOW, False),
    ("$owner", "spendAllowance", 1, TOKEN, False),
    ("spendAllowance", "$spender", 1, TOKEN, False),
    # guarded mint
    ("$paused", "mint", 1, TOKEN, True),
    ("$cap", "mint", 1, TOKEN, False),
    ("mint", "$owner", 1, TOKEN, False),
    ("mint", "$supply", 1, TOKEN, False),
    # burn with accounting
    ("$owner", "burn", 1, TOKEN, False),
    ("$supply", "burn", 1, TOKEN, False),
    ("burn", "$burned", 1, TOKEN, False),
)


def build_token_model() -> Model:
    """Instantiate the token model. Identical on every call."""
    model = Model(TOKEN_MODEL_NAME)
    model.add_objects(TOKEN_OBJECTS)
    for label, initial, capacity, x, y in TOKEN_PLACES:
        model.add_place(label, initial, capacity, x, y, b"")
    for label, x, y, rate in TOKEN_TRANSITIONS:
        model.add_transition(label, x, y, rate, b"")
    for source, target, weight, dimension, inhibit in TOKEN_ARROWS:
        model.add_arrow(source, target, weight, dimension, inhibit, b"")
    _log.debug("token model built", operation="build_token_model", model=repr(model))
    return model


class ModelToken:
    """Token-side view of the model: identifier fixed at construction.

    Balances, allowances and supply bookkeeping live outside this package;
    this class only carries the model reference and identifier they expose.
    """

    def __init__(self, name: str, symbol: str) -> None:
        self.name = name
        self.symbol = symbol
        self._model = build_token_model()
        self._identifier = self._model.identifier()
        _token_log.info("token model bound", operation="bind_model", token=symbol, identifier=self._identifier)

    def model_reference(self) -> Model:
        return self._model

    def model_identifier(self) -> str:
        return self._identifier
