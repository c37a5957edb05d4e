#! /usr/bin/env python3
# SPDX-FileCopyrightText: © 2025 Tenstorrent AI ULC
# SPDX-License-Identifier: Apache-2.0

import argparse
import abc
from typing import Any, Optional

"""
Base CLI script

**Template for Extending:**

.. code-block:: python

from livehdflow.lib.cli_base import CliBase

class Foo(CliBase):
    prog = "foo"
    description = "Does foo"

    @staticmethod
    def add_arguments(parser):
        parser.add_argument("--foo", type=str, help="Some helpful help message")
        # optional, add argument group
        parser_group = parser.add_argument_group(title="Option group", description="Purpose of option group, e.g. output options")
        parser_group.add_argument("--bar", type=str, help="Some helpful help message, related to option group")

    @classmethod
    def run_cli(cls, args=None):
        cl_args = cls.build_parser().parse_args(args)
        # Whatever CLI program needs to do

if __name__ == "__main__":
    Foo.run_cli()

"""


class CliBase(abc.ABC):
    prog = "SomeCliScript"
    description = "aaaa"
    epilog: Optional[str] = None

    @staticmethod
    @abc.abstractmethod
    def add_arguments(parser: argparse.ArgumentParser):
        pass

    @classmethod
    def build_parser(cls) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(prog=cls.prog, description=cls.description, epilog=cls.epilog, formatter_class=argparse.RawTextHelpFormatter, allow_abbrev=False)
        cls.add_arguments(parser)
        return parser

    @classmethod
    @abc.abstractmethod
    def run_cli(cls, args: Optional[list[str]] = None, **kwargs) -> Any:
        pass
