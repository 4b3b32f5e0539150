import copy

import pytest

from metamodel.identity import inclusion_proof, merkle_root_from_leaves, verify_inclusion_proof
from metamodel.token_model import build_token_model


def _leaves(n: int):
    return [f"leaf-{i}" for i in range(n)]


def test_every_leaf_proves_against_root_including_carried_nodes():
    for size in (1, 2, 3, 5, 7, 8, 11):
        leaves = _leaves(size)
        root = merkle_root_from_leaves(leaves).hex()
        for idx in range(size):
            proof = inclusion_proof(leaves, idx)
            assert proof["root"] == root
            assert proof["size"] == size
            assert verify_inclusion_proof(proof), (size, idx)


def test_carried_leaf_has_shorter_path():
    # With five leaves the last one is carried twice before pairing.
    proof = inclusion_proof(_leaves(5), 4)
    assert len(proof["path"]) == 1
    assert proof["path"][0]["side"] == "left"


def test_token_model_inhibit_edge_proves_against_identity():
    model = build_token_model()
    leaves = model.leaves()
    idx = leaves.index("$paused-|>mint")
    proof = inclusion_proof(leaves, idx)
    assert proof["root"] == model.identity_hash().hex()
    assert verify_inclusion_proof(proof)


def test_tampered_proofs_fail():
    proof = inclusion_proof(_leaves(9), 3)
    assert verify_inclusion_proof(proof)

    bad_leaf = dict(proof, leaf="leaf-4")
    assert not verify_inclusion_proof(bad_leaf)

    bad_sibling = copy.deepcopy(proof)
    bad_sibling["path"][0]["hash"] = "00" * 32
    assert not verify_inclusion_proof(bad_sibling)

    bad_side = copy.deepcopy(proof)
    bad_side["path"][0]["side"] = "left" if proof["path"][0]["side"] == "right" else "right"
    assert not verify_inclusion_proof(bad_side)

    short_path = dict(proof, path=proof["path"][:-1])
    assert not verify_inclusion_proof(short_path)

    bad_root = dict(proof, root="11" * 32)
    assert not verify_inclusion_proof(bad_root)


def test_malformed_proof_objects_are_rejected():
    assert not verify_inclusion_proof({})
    assert not verify_inclusion_proof({"size": "x"})
    proof = inclusion_proof(_leaves(4), 1)
    assert not verify_inclusion_proof(dict(proof, leaf_index=4))
    assert not verify_inclusion_proof(dict(proof, root="zz"))


def test_out_of_range_index_raises():
    with pytest.raises(ValueError):
        inclusion_proof(_leaves(3), 3)
    with pytest.raises(ValueError):
        inclusion_proof([], 0)
