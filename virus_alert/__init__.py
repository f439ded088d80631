"""
Virus alert is a simulator of the dynamics defined in the Virus Alert educational board game.

A population visits a set of buildings every day, the virus spreads inside each building according to its spreading
mode and the number of people in each health state is recorded. The main entrypoint is the `simulation` module, which
runs many independent games and aggregates them into a `Report`. The `run_model` module is the command line tool that
reads simulations from a configuration file and writes their results.
"""
