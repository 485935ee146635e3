"""
runner.py
Network execution: plane tensor in, raw policy logits out.

Supported model files:
- Pickle checkpoints {'channels', 'num_blocks', 'state_dict'} for ChessNet
- TorchScript archives (.pt / .pth / .ts) exported from any Lc0-shaped model
"""

import logging
import os
import pickle
import time
from pathlib import Path
from typing import Union

import numpy as np
import torch
import torch.nn as nn

from encoding.state import planes_to_tensor
from model.network import ChessNet

logger = logging.getLogger(__name__)

TORCHSCRIPT_SUFFIXES = ('.pt', '.pth', '.ts')


class ModelLoadError(RuntimeError):
    """Raised when a model file is missing or cannot be loaded."""


class PolicyRunner:
    """
    Run a torch module on single plane tensors.

    The module may return policy logits directly or a (policy, value)
    tuple; only the policy head is used.
    """

    def __init__(self, network: nn.Module):
        self.network = network

        # CPU-only inference
        self.network.to("cpu")
        self.network.eval()

    def run(self, planes: np.ndarray) -> np.ndarray:
        """
        Evaluate one position.

        Args:
            planes: Flat plane tensor from encode_position

        Returns:
            np.ndarray of float32 policy logits, shape [policy_size]
        """
        with torch.no_grad():
            output = self.network(planes_to_tensor(planes))
        if isinstance(output, (tuple, list)):
            output = output[0]
        return output.reshape(-1).cpu().numpy().astype(np.float32)


def _load_checkpoint(path: Path) -> nn.Module:
    with open(path, 'rb') as f:
        checkpoint_data = pickle.load(f)

    network = ChessNet(
        channels=checkpoint_data['channels'],
        num_blocks=checkpoint_data['num_blocks']
    )
    network.load_state_dict(checkpoint_data['state_dict'])
    return network


def save_checkpoint(network: nn.Module, path: Union[str, os.PathLike]) -> None:
    """Write a ChessNet to a pickle checkpoint readable by load_policy_runner."""
    checkpoint_data = {
        'channels': network.channels,
        'num_blocks': network.num_blocks,
        'state_dict': network.state_dict(),
    }
    with open(path, 'wb') as f:
        pickle.dump(checkpoint_data, f)


def load_policy_runner(path: Union[str, os.PathLike]) -> PolicyRunner:
    """
    Load a model file into a PolicyRunner.

    Args:
        path: Pickle checkpoint (.pkl) or TorchScript archive

    Returns:
        PolicyRunner wrapping the loaded module

    Raises:
        ModelLoadError: If the file does not exist or cannot be loaded
    """
    path = Path(path)
    if not path.exists():
        raise ModelLoadError(f"Model file not found: {path}")

    start = time.perf_counter()
    try:
        if path.suffix in TORCHSCRIPT_SUFFIXES:
            network = torch.jit.load(str(path), map_location="cpu")
        else:
            network = _load_checkpoint(path)
    except (OSError, RuntimeError, KeyError, TypeError, EOFError, pickle.UnpicklingError) as e:
        raise ModelLoadError(f"Failed to load model {path}: {e}") from e

    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(f"Loaded {path.name} in {elapsed_ms:.0f}ms")
    return PolicyRunner(network)
