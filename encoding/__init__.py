"""
encoding package
Lc0/Maia board encoding and policy decoding for move-prediction networks.
"""

from encoding.state import encode_position, encode_fen, planes_to_tensor, INPUT_SIZE
from encoding.move import MoveIndexTable, get_move_table, encode_move, decode_move, POLICY_SIZE
from encoding.policy import RankedMove, decode_top_moves, policy_distribution, softmax
from encoding.errors import EncodingError, PolicySizeMismatchError

__all__ = [
    'encode_position', 'encode_fen', 'planes_to_tensor', 'INPUT_SIZE',
    'MoveIndexTable', 'get_move_table', 'encode_move', 'decode_move', 'POLICY_SIZE',
    'RankedMove', 'decode_top_moves', 'policy_distribution', 'softmax',
    'EncodingError', 'PolicySizeMismatchError',
]
