# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Page content helpers: markdown text to Notion blocks."""

from .blocks import BlockEnhancer, to_blocks

__all__ = ["BlockEnhancer", "to_blocks"]
