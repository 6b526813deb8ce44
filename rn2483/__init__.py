"""RN2483 LoRa module link over a serial port.

Correlates commands written to the module with the lines it answers,
while forwarding unsolicited lines to an observer callback.
"""

from rn2483.core.connection import Connection
from rn2483.core.device import RN2483
from rn2483.core.command_response import CommandResponse, ResponseStatus
from rn2483.config.config_models import Config

__all__ = ['Connection', 'RN2483', 'CommandResponse', 'ResponseStatus', 'Config']

__version__ = "0.1.0"
