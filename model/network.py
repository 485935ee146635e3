"""
network.py
Reference Lc0-shaped network: ResNet trunk with policy and value heads.

Architecture:
    Input [B, 112, 8, 8]
    → Conv 3×3, channels
    → BatchNorm + ReLU
    → ResBlock × num_blocks
    → Policy Head (1858 raw logits) + Value Head (scalar tanh)

Stands in for a trained Maia network wherever the encoder/decoder
pipeline needs a real torch module with the right input and output sizes.
"""

import torch
import torch.nn as nn
import torch.nn.functional as F
from typing import Tuple

from encoding.move import POLICY_SIZE
from encoding.state import NUM_PLANES


class ResidualBlock(nn.Module):
    """
    Residual block with two conv layers and skip connection.

    Structure:
        x → conv1 → bn1 → relu → conv2 → bn2 → (+x) → relu
    """

    def __init__(self, channels: int):
        super(ResidualBlock, self).__init__()

        self.conv1 = nn.Conv2d(channels, channels, 3, padding=1)
        self.bn1 = nn.BatchNorm2d(channels)
        self.conv2 = nn.Conv2d(channels, channels, 3, padding=1)
        self.bn2 = nn.BatchNorm2d(channels)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        residual = x
        x = F.relu(self.bn1(self.conv1(x)))
        x = self.bn2(self.conv2(x))
        return F.relu(x + residual)


class ChessNet(nn.Module):
    """
    Policy/value network over the 112-plane input.

    Input: [B, 112, 8, 8] plane tensor
    Output: (policy logits [B, 1858], value [B, 1])
    """

    def __init__(self, channels: int = 64, num_blocks: int = 4):
        """
        Args:
            channels: Number of channels in residual blocks
            num_blocks: Number of residual blocks
        """
        super(ChessNet, self).__init__()

        self.channels = channels
        self.num_blocks = num_blocks

        self.initial_conv = nn.Conv2d(NUM_PLANES, channels, 3, padding=1)
        self.initial_bn = nn.BatchNorm2d(channels)

        self.res_blocks = nn.ModuleList([ResidualBlock(channels) for _ in range(num_blocks)])

        # Policy head
        self.policy_conv = nn.Conv2d(channels, 32, 1)
        self.policy_bn = nn.BatchNorm2d(32)
        self.policy_fc = nn.Linear(32 * 8 * 8, POLICY_SIZE)

        # Value head
        self.value_conv = nn.Conv2d(channels, 32, 1)
        self.value_bn = nn.BatchNorm2d(32)
        self.value_fc1 = nn.Linear(32 * 8 * 8, 64)
        self.value_fc2 = nn.Linear(64, 1)

    def forward(self, x: torch.Tensor) -> Tuple[torch.Tensor, torch.Tensor]:
        """
        Forward pass through network.

        Args:
            x: Plane tensor [B, 112, 8, 8]

        Returns:
            policy: Raw logits [B, 1858] (no softmax, no legality mask)
            value: Position evaluation [B, 1], range [-1, 1]
        """
        x = F.relu(self.initial_bn(self.initial_conv(x)))

        for block in self.res_blocks:
            x = block(x)

        return self.forward_policy(x), self.forward_value(x)

    def forward_policy(self, x: torch.Tensor) -> torch.Tensor:
        x = F.relu(self.policy_bn(self.policy_conv(x)))
        x = x.view(x.size(0), -1)
        return self.policy_fc(x)

    def forward_value(self, x: torch.Tensor) -> torch.Tensor:
        x = F.relu(self.value_bn(self.value_conv(x)))
        x = x.view(x.size(0), -1)
        x = F.relu(self.value_fc1(x))
        return torch.tanh(self.value_fc2(x))
