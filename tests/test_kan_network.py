"""
Tests for the network driver: build, forward_prop, backward_prop and
update_weights, including gradient checks against finite differences.
"""

import numpy as np
import pytest
import sys
import os

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from kan_engine import (
    build, build_kan_network, forward_prop, backward_prop, update_weights,
    for_each_node, get_output_node, clone_kan, ConfigurationError, InputMismatchError,
)
from kan_utils.losses import square_error_der


def unit_der(output, target):
    return 1.0


def snapshot(net):
    return ([list(e.learnable_function.control_points) for e in net.edges],
            [n.bias for n in net.nodes])


class TestBuild:

    def test_shape_and_edge_count(self):
        net = build([2, 3, 1], ["x1", "x2"], grid_size=5, degree=3, use_bias=False, seed=0)
        assert net.layer_sizes == [2, 3, 1]
        assert net.num_edges == 2 * 3 + 3 * 1
        assert [n.id for n in net.layer(0)] == ["x1", "x2"]
        assert [n.id for n in net.layer(1)] == ["1", "2", "3"]
        assert get_output_node(net).id == "4"
        assert [e.id for e in net.edges] == [
            "x1-1", "x2-1", "x1-2", "x2-2", "x1-3", "x2-3", "1-4", "2-4", "3-4"]

    def test_initial_output_is_small(self):
        net = build([2, 3, 1], ["x1", "x2"], grid_size=5, degree=3, use_bias=False, seed=0)
        y = forward_prop(net, [0, 0])
        assert np.isfinite(y)
        assert abs(y) < 0.5

    def test_full_bipartite_connectivity(self):
        net = build_kan_network([3, 4, 2, 1], ["a", "b", "c"], seed=1)
        for layer_idx in range(1, net.num_layers):
            prev = net.layers[layer_idx - 1]
            for node in net.layer(layer_idx):
                sources = [e.source for e in net.input_edges(node)]
                assert sources == prev
                for edge in net.input_edges(node):
                    assert net.dest(edge) is node
                    assert net.edges.index(edge) in net.source(edge).output_edges
        assert all(not n.input_edges for n in net.layer(0))
        assert not get_output_node(net).output_edges

    def test_edges_shared_between_endpoints(self):
        net = build([2, 2, 1], ["a", "b"], seed=2)
        src = net.node(0, 0)
        dst = net.node(1, 1)
        shared = set(src.output_edges) & set(dst.input_edges)
        assert len(shared) == 1
        edge = net.edges[shared.pop()]
        assert edge.id == "a-2"

    def test_bias_only_on_non_input_nodes(self):
        net = build([2, 3, 1], ["x1", "x2"], use_bias=True, seed=0)
        assert all(n.bias == 0.0 for n in net.layer(0))
        assert all(n.bias != 0.0 for n in net.layer(1) + net.layer(2))

        net = build([2, 3, 1], ["x1", "x2"], use_bias=False, seed=0)
        assert all(n.bias == 0.0 for n in net.nodes)

    def test_degree_is_capped(self):
        net = build([1, 1], ["x"], grid_size=2, degree=5, seed=0)
        assert net.edges[0].learnable_function.degree == 1

    def test_seeded_builds_are_reproducible(self):
        a = build([2, 3, 1], ["x1", "x2"], use_bias=True, seed=42)
        b = build([2, 3, 1], ["x1", "x2"], use_bias=True, seed=42)
        c = build([2, 3, 1], ["x1", "x2"], use_bias=True, rng=np.random.default_rng(42))
        assert snapshot(a) == snapshot(b) == snapshot(c)
        assert snapshot(a) != snapshot(build([2, 3, 1], ["x1", "x2"], use_bias=True, seed=43))

    @pytest.mark.parametrize("shape,ids", [
        ([2, 3, 2], ["x1", "x2"]),
        ([2, 1], ["x1"]),
        ([2, 1], ["x1", "x2", "x3"]),
        ([], []),
        ([2, 0, 1], ["x1", "x2"]),
    ])
    def test_configuration_errors(self, shape, ids):
        with pytest.raises(ConfigurationError):
            build(shape, ids)


class TestForwardProp:

    def test_node_output_invariant(self):
        net = build([2, 3, 1], ["x1", "x2"], use_bias=True, seed=5)
        forward_prop(net, [0.3, -0.7])
        for layer_idx in range(1, net.num_layers):
            for node in net.layer(layer_idx):
                expected = node.bias + sum(
                    e.learnable_function.evaluate(net.source(e).output) for e in net.input_edges(node))
                assert node.output == pytest.approx(expected, abs=1e-14)

    def test_returns_output_node_value(self):
        net = build([2, 2, 1], ["a", "b"], seed=6)
        assert forward_prop(net, [0.5, 0.5]) == get_output_node(net).output

    def test_input_mismatch_leaves_state_untouched(self):
        net = build([2, 3, 1], ["x1", "x2"], seed=0)
        with pytest.raises(InputMismatchError):
            forward_prop(net, [0.1, 0.2, 0.3])
        with pytest.raises(ValueError):
            forward_prop(net, [0.1])
        assert all(n.output == 0.0 for n in net.nodes)
        assert all(e.last_input == 0.0 for e in net.edges)


class TestBackwardProp:

    def test_gradient_check_single_edge(self):
        net = build([1, 1], ["x"], grid_size=5, degree=3, seed=0)
        forward_prop(net, [0.37])
        backward_prop(net, 0.0, unit_der)

        edge = net.edges[0]
        analytic = list(edge.acc_gradients)
        eps = 1e-5
        base = forward_prop(net, [0.37])
        for i in range(len(analytic)):
            edge.learnable_function.control_points[i] += eps
            numeric = (forward_prop(net, [0.37]) - base) / eps
            edge.learnable_function.control_points[i] -= eps
            assert numeric == pytest.approx(analytic[i], rel=1e-3, abs=1e-8)

    def test_gradient_check_hidden_layer(self):
        net = build([2, 3, 1], ["x1", "x2"], grid_size=5, degree=3, seed=8)
        # Spread the output-layer splines so hidden activations matter
        for edge in net.output_edges(net.node(1, 0)) + net.output_edges(net.node(1, 1)):
            fn = edge.learnable_function
            fn.control_points = [0.8 * np.sin(3.0 * i) for i in range(len(fn.control_points))]

        inputs = [0.45, -0.2]
        forward_prop(net, inputs)
        backward_prop(net, 0.0, unit_der)
        analytic = [list(e.acc_gradients) for e in net.edges]

        eps = 1e-5
        for e_idx in (0, 3):
            fn = net.edges[e_idx].learnable_function
            for i in range(len(fn.control_points)):
                fn.control_points[i] += eps
                up = forward_prop(net, inputs)
                fn.control_points[i] -= 2 * eps
                down = forward_prop(net, inputs)
                fn.control_points[i] += eps
                numeric = (up - down) / (2 * eps)
                assert numeric == pytest.approx(analytic[e_idx][i], rel=1e-3, abs=1e-8)

    def test_output_der_is_seeded_from_loss(self):
        net = build([2, 3, 1], ["x1", "x2"], seed=0)
        y = forward_prop(net, [0.1, 0.9])
        backward_prop(net, 1.0, square_error_der)
        assert get_output_node(net).output_der == pytest.approx(y - 1.0)

    def test_hidden_output_der_is_reset_between_calls(self):
        net = build([2, 3, 1], ["x1", "x2"], seed=0)
        forward_prop(net, [0.1, 0.9])
        backward_prop(net, 1.0, square_error_der)
        first = [n.output_der for n in net.layer(1)]
        backward_prop(net, 1.0, square_error_der)
        second = [n.output_der for n in net.layer(1)]
        assert second == pytest.approx(first)

        out = get_output_node(net)
        for node in net.layer(1):
            edge = net.output_edges(node)[0]
            expected = out.output_der * edge.learnable_function.derivative(edge.last_input)
            assert node.output_der == pytest.approx(expected)

    def test_edges_accumulate_once_per_example(self):
        net = build([2, 3, 1], ["x1", "x2"], seed=0)
        for x in ([0.1, 0.2], [0.3, -0.4], [-0.5, 0.6]):
            forward_prop(net, x)
            backward_prop(net, 0.0, square_error_der)
        assert all(e.num_accumulated_grads == 3 for e in net.edges)


class TestUpdateWeights:

    def test_zero_learning_rate_is_idempotent(self):
        net = build([2, 3, 1], ["x1", "x2"], use_bias=True, seed=4)
        before = snapshot(net)
        for x in ([0.1, 0.2], [0.3, -0.4]):
            forward_prop(net, x)
            backward_prop(net, 0.5, square_error_der)
        update_weights(net, 0.0)
        assert snapshot(net) == before
        assert all(e.num_accumulated_grads == 0 for e in net.edges)

    def test_zero_bias_is_never_updated(self):
        net = build([1, 2, 1], ["x"], use_bias=False, seed=4)
        forward_prop(net, [0.3])
        backward_prop(net, 2.0, square_error_der)
        update_weights(net, 0.5)
        assert all(n.bias == 0.0 for n in net.nodes)

    def test_bias_step_uses_current_output_der(self):
        net = build([1, 2, 1], ["x"], use_bias=True, seed=9)
        forward_prop(net, [0.3])
        backward_prop(net, 2.0, square_error_der)
        expected = [n.bias - 0.1 * n.output_der for n in net.nodes[1:]]
        update_weights(net, 0.1)
        assert [n.bias for n in net.nodes[1:]] == pytest.approx(expected)

    def test_batch_of_identical_examples_matches_single_example(self):
        single = build([2, 3, 1], ["x1", "x2"], use_bias=True, seed=11)
        double = clone_kan(single)

        forward_prop(single, [0.2, -0.3])
        backward_prop(single, 0.7, square_error_der)
        update_weights(single, 0.2)

        for _ in range(2):
            forward_prop(double, [0.2, -0.3])
            backward_prop(double, 0.7, square_error_der)
        update_weights(double, 0.2)

        (cps_s, bias_s), (cps_d, bias_d) = snapshot(single), snapshot(double)
        assert bias_d == pytest.approx(bias_s, abs=1e-15)
        for a, b in zip(cps_s, cps_d):
            assert b == pytest.approx(a, abs=1e-15)

    def test_bias_overwritten_edges_averaged(self):
        net = build([1, 1], ["x"], use_bias=True, seed=12)
        only_last = clone_kan(net)

        for x, t in (([0.6], 1.0), ([-0.4], -1.0)):
            forward_prop(net, x)
            backward_prop(net, t, square_error_der)

        forward_prop(only_last, [-0.4])
        backward_prop(only_last, -1.0, square_error_der)

        update_weights(net, 0.3)
        update_weights(only_last, 0.3)

        # Bias sees only the last example
        assert get_output_node(net).bias == pytest.approx(get_output_node(only_last).bias, abs=1e-15)
        # Edge update is the mean over both examples
        assert net.edges[0].learnable_function.control_points != pytest.approx(
            only_last.edges[0].learnable_function.control_points)


class TestInspection:

    def test_for_each_node(self):
        net = build([2, 3, 1], ["x1", "x2"], seed=0)
        visited = []
        for_each_node(net, True, lambda n: visited.append(n.id))
        assert visited == ["1", "2", "3", "4"]

        visited = []
        for_each_node(net, False, lambda n: visited.append(n.id))
        assert visited == ["x1", "x2", "1", "2", "3", "4"]

    def test_get_output_node(self):
        net = build([3, 1], ["a", "b", "c"], seed=0)
        assert get_output_node(net) is net.node(1, 0)
