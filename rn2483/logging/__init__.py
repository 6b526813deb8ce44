"""Communication logging module.

Records port events, commands, responses and received lines for
debugging a link to the radio module.
"""

from rn2483.logging.log_models import LogEntry
from rn2483.logging.file_handler import FileHandler
from rn2483.logging.communication_logger import CommunicationLogger
from rn2483.logging.trace_sink import TraceSink

__all__ = ['LogEntry', 'FileHandler', 'CommunicationLogger', 'TraceSink']
