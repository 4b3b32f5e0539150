from metamodel.model import Model
from metamodel.tokentype import build_vector, zero_vector


def test_no_objects_yields_single_slot():
    assert build_vector(7, "", []) == (7,)
    assert build_vector(7, "$anything", []) == (7,)


def test_value_lands_at_matching_object():
    assert build_vector(7, "$b", ["$a", "$b"]) == (0, 7)
    assert build_vector(7, "$a", ["$a", "$b"]) == (7, 0)


def test_unknown_or_empty_dimension_falls_back_to_index_zero():
    assert build_vector(7, "$nonexistent", ["$a", "$b"]) == (7, 0)
    assert build_vector(7, "", ["$a", "$b", "$c"]) == (7, 0, 0)


def test_single_object_ignores_dimension():
    assert build_vector(5, "$other", ["$a"]) == (5,)


def test_duplicate_objects_resolve_to_first_match():
    assert build_vector(3, "$b", ["$a", "$b", "$b"]) == (0, 3, 0)


def test_zero_vector_follows_object_count():
    assert zero_vector([]) == ()
    assert zero_vector(["$a", "$b"]) == (0, 0)


def test_model_token_type_tracks_current_objects():
    model = Model()
    assert model.token_type(7) == (7,)
    model.add_objects(["$allow", "$token"])
    assert model.token_type(7, "$token") == (0, 7)
