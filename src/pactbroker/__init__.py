"""Client for the pact broker: HAL navigation, pact publishing and verification results."""

from pactbroker.clients import PactBrokerClient, PactBrokerConsumer, PactResponse
from pactbroker.core import OperationResult, PactBrokerError
from pactbroker.verification import Failure, Success, VerificationOutcome, build_payload

__version__ = "0.1.0"

__all__ = [
    "PactBrokerClient",
    "PactBrokerConsumer",
    "PactResponse",
    "OperationResult",
    "PactBrokerError",
    "VerificationOutcome",
    "Success",
    "Failure",
    "build_payload",
]
