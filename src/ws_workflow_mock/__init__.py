"""WebSocket Workflow Mock.

A mock WebSocket server for end-to-end test suites:
- a workflow script (JSON fixture) of expected client messages, scheduled
  server messages and reconnect markers
- a privileged control connection that installs the script
- a data connection on which the script is replayed and validated
"""

__version__ = "0.1.0"

from ws_workflow_mock.config import MockServerSettings

__all__ = ["__version__", "MockServerSettings"]
