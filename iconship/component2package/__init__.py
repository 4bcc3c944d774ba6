"""
Component to package pipeline components.

This module provides the assembly of generated components into an npm
package archive and its publication to an artifact feed.
"""

from iconship.component2package.package_assembler import PackageAssembler
from iconship.component2package.publisher import Publisher, PublishState
