"""Adapters to the systems monocle reads from.

Modules
-------
git_metadata
    ``GitProjectResolver`` turns the local checkout's ``origin`` remote and
    current branch into a ``ProjectRef``.
circleci_client
    ``CircleCIClient`` lists recent builds through the CircleCI v1.1 REST
    API using ``httpx``.
"""
