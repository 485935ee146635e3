"""
model package
Network execution collaborator for the encoder/decoder pipeline.
"""

from model.network import ChessNet, ResidualBlock
from model.runner import PolicyRunner, ModelLoadError, load_policy_runner, save_checkpoint

__all__ = ['ChessNet', 'ResidualBlock', 'PolicyRunner', 'ModelLoadError', 'load_policy_runner', 'save_checkpoint']
