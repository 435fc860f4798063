"""LAKEBLOCKS test suite.

Folder taxonomy
- unit/         : Isolated, fast checks of a single module/class/function.
- contract/     : Behavior every namespace backend and the block store over it
                  must share, parametrized over the memory and local backends.
- integration/  : Real interactions with the local filesystem.
- e2e/          : The ``lakeblocks`` command line, invoked through CliRunner.

General guidance
- Keep unit fast and deterministic; prefer `MemoryNamespace` over mocks.
- Property-based tests live with the layer they exercise and use
  @pytest.mark.property.
- Each test is marked with the name of its top-level folder (see conftest).
"""
