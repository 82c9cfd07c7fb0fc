"""SNAPKEEP test suite.

Folder taxonomy
- unit/         : Isolated, fast checks of a single module/class/function.
- contract/     : Behaviour every SnapshotStore backend must share.
- integration/  : Real filesystem use and pytest subprocess runs of the plugin.
- e2e/          : The `snapkeep` command line driven through CliRunner.

General guidance
- Keep unit fast and deterministic; use the in-memory store at boundaries.
- Contract parametrizes the stores so they stay interchangeable.
- Property-based tests live with the layer they exercise and use @pytest.mark.property.
- Suite markers (unit, contract, integration, e2e) are added by the root conftest.
"""
