"""taskshift: three-bucket task reminder with durable alarms and a daily rollover."""

__version__ = "0.1.0"
