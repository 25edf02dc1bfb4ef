from pactbroker.clients.base import BrokerHTTPClient
from pactbroker.clients.broker import PactBrokerClient
from pactbroker.clients.models import PactBrokerConsumer, PactResponse

__all__ = ["BrokerHTTPClient", "PactBrokerClient", "PactBrokerConsumer", "PactResponse"]
