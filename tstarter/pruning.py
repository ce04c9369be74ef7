"""Removal of optional template features.

Each optional feature is described by a ``FeatureRule``: the tsconfig fragment
it contributes, the export lines it adds to ``src/index.ts`` and the source
files that implement it.  Disabling a feature undoes all three.

Pruning is idempotent and the two features may be pruned in either order.
The Node.js rule also removes the hash module, which the DOM rule removes too,
so whichever runs second finds that export and those files already gone.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .errors import TemplateDriftError
from .utils import apply_edit, delete_paths, read_required


@dataclass(frozen=True)
class FeatureRule:
    """Edits that remove one optional feature from a provisioned template."""

    name: str
    tsconfig_from: str
    tsconfig_to: str
    exports: tuple[str, ...]
    modules: tuple[str, ...]

    def module_paths(self, project_path: Path) -> list[Path]:
        """Implementation and spec files for every module this feature owns."""
        lib = project_path / "src" / "lib"
        return [lib / f"{module}{suffix}" for module in self.modules for suffix in (".ts", ".spec.ts")]


DOM_FEATURE = FeatureRule(
    name="dom",
    tsconfig_from='"lib": ["es2017", "dom"]',
    tsconfig_to='"lib": ["es2017"]',
    exports=("export * from './lib/hash';\n",),
    modules=("hash",),
)

NODE_FEATURE = FeatureRule(
    name="node",
    tsconfig_from='"types": ["node"]',
    tsconfig_to='"types": []',
    exports=(
        "export * from './lib/async';\n",
        "export * from './lib/hash';\n",
    ),
    modules=("hash", "async"),
)


def prune_feature(project_path: str | Path, rule: FeatureRule, enabled: bool) -> bool:
    """Remove *rule*'s feature from the project unless it is *enabled*.

    Returns:
        ``True`` if anything was pruned (i.e. the feature was disabled).

    Raises:
        TemplateDriftError: If tsconfig.json contains neither the full nor the
            reduced form of the feature's fragment, or if src/index.ts still
            references one of the feature's modules after its exports were removed.
        FatalIOError: If tsconfig.json or src/index.ts is missing.
    """
    if enabled:
        return False
    root = Path(project_path)
    apply_edit(root / "tsconfig.json", rule.tsconfig_from, rule.tsconfig_to)
    entry = root / "src" / "index.ts"
    for line in rule.exports:
        apply_edit(entry, line, "")
    remaining = read_required(entry)
    for module in rule.modules:
        reference = f"'./lib/{module}'"
        if reference in remaining:
            raise TemplateDriftError(
                entry, reference, f"Export of removed module {reference} still present"
            )
    delete_paths(rule.module_paths(root))
    return True


def prune_dom_feature(project_path: str | Path, enabled: bool) -> bool:
    """Drop the ``dom`` lib and the hash module when DOM definitions are not wanted."""
    return prune_feature(project_path, DOM_FEATURE, enabled)


def prune_platform_feature(project_path: str | Path, enabled: bool) -> bool:
    """Drop Node.js types and the async and hash modules when Node definitions are not wanted."""
    return prune_feature(project_path, NODE_FEATURE, enabled)
