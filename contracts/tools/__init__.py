# -*- coding: utf-8 -*-
"""
Contracts tooling helpers used by tests and local scripts.

- deploy : bootstrap sequencing for the identity contracts on a local Host
"""
