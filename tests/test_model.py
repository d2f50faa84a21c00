"""Tests for policy model access."""
from policy_adapter.adapter import PolicyAdapter
from policy_adapter.model import append_rule, iter_rules
from policy_adapter.stores.memory import InMemoryPolicyStore


class Assertion:
    def __init__(self):
        self.policy = []


class EngineModel:
    """Minimal stand-in for an engine model with declared sections."""

    def __init__(self):
        self.model = {
            "p": {"p": Assertion()},
            "g": {"g": Assertion(), "g2": Assertion()},
        }


def test_append_rule_creates_entries_in_mapping():
    """Test plain mappings grow missing sections and types."""
    model = {}
    append_rule(model, "g", "g2", ["data1", "group1"])

    assert model == {"g": {"g2": [["data1", "group1"]]}}


def test_append_rule_to_engine_model():
    """Test engine models receive rules in their assertion policy lists."""
    model = EngineModel()
    append_rule(model, "p", "p", ["alice", "data1", "read"])

    assert model.model["p"]["p"].policy == [["alice", "data1", "read"]]


def test_iter_rules_engine_model():
    """Test rules are read back from p and g sections."""
    model = EngineModel()
    model.model["p"]["p"].policy.append(["alice", "data1", "read"])
    model.model["g"]["g2"].policy.append(["data1", "group1"])

    assert list(iter_rules(model)) == [("p", ["alice", "data1", "read"]), ("g2", ["data1", "group1"])]


def test_adapter_round_trip_with_engine_model():
    """Test load and save work against an engine model."""
    store = InMemoryPolicyStore([
        {"ptype": "p", "v0": "alice", "v1": "data1", "v2": "read"},
        {"ptype": "g", "v0": "alice", "v1": "admin"},
    ])
    adapter = PolicyAdapter(store)
    model = EngineModel()
    adapter.load_policy(model)

    assert model.model["p"]["p"].policy == [["alice", "data1", "read"]]
    assert model.model["g"]["g"].policy == [["alice", "admin"]]
    assert adapter.save_policy(model) == 2
