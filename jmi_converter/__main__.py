"""Package entry point for ``python -m jmi_converter``.

Delegates to the CLI's main() function.
"""

from jmi_converter.cli import main

if __name__ == "__main__":
    main()
