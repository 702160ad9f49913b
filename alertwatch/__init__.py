"""alertwatch — poll Alertmanager targets and notify each new alert once."""

__version__ = "0.1.0"
