from .base import SamplerUnavailable, parse_gaze_payload
from .dummy import DummySampler
from .zmq import ZMQSampler

__all__ = ["SamplerUnavailable", "parse_gaze_payload", "DummySampler", "ZMQSampler"]
