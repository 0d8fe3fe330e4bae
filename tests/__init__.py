"""Test package for Little Math Champion.

Core tests exercise question generation, the session state machine, scoring,
reports, export and storage without pygame.  UI smoke tests run headlessly
using SDL's dummy video driver.  Run ``pytest`` from the project root.
"""
