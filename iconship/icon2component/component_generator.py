"""
Component generator module.

This module turns normalized SVG markup into the React sources shipped in the
package: an untyped JSX component, a typed TSX component, a .d.ts declaration
and one barrel export line per variant.
"""

from typing import List, Optional, Sequence

from iconship.core.constants import (
    CANONICAL_VIEWBOX,
    CANONICAL_COLOR,
    DEFAULT_COLLISION_POLICY,
)
from iconship.core.error_handler import GenerationError
from iconship.core.logging_config import get_logger
from iconship.core.models import RawAsset, ComponentArtifactSet
from iconship.icon2component.identifier import IdentifierRegistry
from iconship.icon2component.markup_normalizer import ROOT_TAG_PATTERN, normalize

logger = get_logger(__name__)

UNTYPED_TEMPLATE = """import React from 'react';

const {identifier} = (props) => (
  {markup}
);

export default {identifier};
"""

TYPED_TEMPLATE = """import * as React from "react";
import type {{ SVGProps }} from "react";

interface IProps extends SVGProps<SVGSVGElement> {{
  height: number | string;
  width: number | string;
}}

const {identifier}: React.FC<IProps> = (props) => {{
  const {{ height, width, ...rest }} = props;
  return (
    {markup}
  );
}};

export default {identifier};
"""

DECLARATION_TEMPLATE = """import * as React from "react";
import {{ SVGProps }} from "react";

export interface IProps extends SVGProps<SVGSVGElement> {{
  height: number | string;
  width: number | string;
}}

declare const {identifier}: React.FC<IProps>;
export default {identifier};
"""

EXPORT_LINE_TEMPLATE = 'export {{ default as {identifier} }} from "./{identifier}";'

UNTYPED_ROOT_ATTRIBUTES = "{...props}"
TYPED_ROOT_ATTRIBUTES = "height={height} width={width} {...rest}"


def augment_root(markup: str, attributes: str) -> str:
    """
    Insert JSX attributes right after the root "<svg" of the markup.

    Args:
        markup (str): Normalized markup
        attributes (str): JSX attribute text to insert

    Returns:
        str: The markup with the attributes inserted, or unchanged if it has no root tag
    """
    match = ROOT_TAG_PATTERN.search(markup)
    if match is None:
        return markup

    position = match.start() + len("<svg")
    return f"{markup[:position]} {attributes}{markup[position:]}"


class ComponentGenerator:
    """
    Class for generating component sources from icon assets.

    The generator is pure: it returns strings and never touches the filesystem.
    """

    def __init__(
        self,
        collision_policy: str = DEFAULT_COLLISION_POLICY,
        viewbox: str = CANONICAL_VIEWBOX,
        color: str = CANONICAL_COLOR
    ):
        """
        Initialize the ComponentGenerator.

        Args:
            collision_policy: What to do when two assets derive the same
                identifier ("fail" or "suffix").
            viewbox: viewBox forced onto every root element.
            color: color forced onto every root element.
        """
        self.collision_policy = collision_policy
        self.viewbox = viewbox
        self.color = color

    def generate(self, identifier: str, normalized_markup: str) -> ComponentArtifactSet:
        """
        Generate the artifact set for one icon.

        Args:
            identifier: PascalCase component name.
            normalized_markup: Markup returned by normalize().

        Returns:
            The generated sources and export lines.
        """
        untyped_markup = augment_root(normalized_markup, UNTYPED_ROOT_ATTRIBUTES)
        typed_markup = augment_root(normalized_markup, TYPED_ROOT_ATTRIBUTES)
        export_line = EXPORT_LINE_TEMPLATE.format(identifier=identifier)

        return ComponentArtifactSet(
            identifier=identifier,
            untyped_source=UNTYPED_TEMPLATE.format(identifier=identifier, markup=untyped_markup),
            typed_source=TYPED_TEMPLATE.format(identifier=identifier, markup=typed_markup),
            declaration_source=DECLARATION_TEMPLATE.format(identifier=identifier),
            untyped_export_line=export_line,
            typed_export_line=export_line
        )

    def generate_all(
        self,
        assets: Sequence[RawAsset],
        collision_policy: Optional[str] = None
    ) -> List[ComponentArtifactSet]:
        """
        Normalize, name and generate every asset, keeping delivery order.

        Args:
            assets: Assets in the order delivered by the fetcher.
            collision_policy: Overrides the generator's collision policy for this call.

        Returns:
            One artifact set per asset, in the same order.

        Raises:
            GenerationError: On an identifier collision under the "fail"
                policy or any unexpected error while generating an asset.
        """
        registry = IdentifierRegistry(collision_policy or self.collision_policy)
        artifact_sets = []

        for asset in assets:
            try:
                identifier = registry.register(asset.name)
                normalized = normalize(asset.markup, viewbox=self.viewbox, color=self.color)
                artifact_sets.append(self.generate(identifier, normalized))
            except GenerationError:
                raise
            except Exception as e:
                raise GenerationError(
                    f"Failed to generate component for '{asset.name}': {e}",
                    asset_name=asset.name,
                    cause=e
                ) from e

            logger.debug(f"Generated component {identifier} from {asset.name}")

        logger.info(f"Generated {len(artifact_sets)} component(s)")
        return artifact_sets
