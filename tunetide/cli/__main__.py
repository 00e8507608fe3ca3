"""Allow ``python -m tunetide.cli`` execution."""

from tunetide.cli.manage import main

main()
