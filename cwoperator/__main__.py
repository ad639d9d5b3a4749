"""
CLI entry point, when used as a module: `python -m cwoperator`.

Useful for debugging in the IDEs (use the start-mode "Module", module "cwoperator").
"""
from cwoperator import cli

if __name__ == '__main__':
    cli.main()
