"""monocle build monitor — projection, rendering and the terminal presenter.

Modules
-------
projection
    ``DisplayModelBuilder`` turns raw CircleCI builds into a frozen
    ``DisplayModel`` with a colour class per row.
renderer
    ``BuildTableRenderer`` turns a ``DisplayModel`` into Rich renderables.
presenter
    The ``Presenter`` protocol and ``PresenterEvent`` enum.
terminal
    ``TerminalPresenter``: full-screen ``Rich.Live`` display plus keyboard
    and resize events.
"""
