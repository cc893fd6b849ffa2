"""Routing engine core: topology, routers, rounds and convergence."""
