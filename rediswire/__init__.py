"""Redis wire protocol building blocks: command encoding, reply objects, callback queues and pub/sub bookkeeping."""

__version__ = "1.0.3"