from .errors import KANError, ConfigurationError, InputMismatchError
from .learnable_function import LearnableFunction
from .kan_edge import KANEdge
from .kan_node import KANNode
from .kan_network import (
    KANNetwork, build, build_kan_network, forward_prop, backward_prop,
    update_weights, for_each_node, get_output_node
)
from .kan_functions import (
    DEFAULT_CONFIG, create_kan, create_kan_from_config, train_step, evaluate, predict,
    get_edge_functions, count_edges, count_parameters, summary, clone_kan
)
from .trainer import KANTrainer

__all__ = [
    'KANError', 'ConfigurationError', 'InputMismatchError',
    'LearnableFunction', 'KANEdge', 'KANNode', 'KANNetwork',
    'build', 'build_kan_network', 'forward_prop', 'backward_prop',
    'update_weights', 'for_each_node', 'get_output_node',
    'DEFAULT_CONFIG', 'create_kan', 'create_kan_from_config', 'train_step', 'evaluate', 'predict',
    'get_edge_functions', 'count_edges', 'count_parameters', 'summary', 'clone_kan',
    'KANTrainer'
]
