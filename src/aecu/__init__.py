"""Automated content upgrade runner."""

import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())
