"""
Logging Module

Package-wide log configuration and the per-execution event log.
"""
from agentflow.logging.execution_logger import ExecutionLogger
from agentflow.logging.log_config import JSONFormatter, TextFormatter, configure_logging

__all__ = ['ExecutionLogger', 'JSONFormatter', 'TextFormatter', 'configure_logging']
