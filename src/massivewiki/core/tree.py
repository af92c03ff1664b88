"""Page tree for the navigation sidebar.

A name can be a markdown file, a directory, or both. When both exist the
node is a page-parent: it has content of its own and can be expanded to
show its children.
"""

from pathlib import Path

from massivewiki.core.errors import StorageError
from massivewiki.core.models import NodeType, TreeNode
from massivewiki.core.storage import PAGE_SUFFIX

HOME_NODE = "home"


def _sort_key(node: TreeNode) -> tuple[bool, str, str]:
    """Home first, then case-insensitive by name."""
    return (node.name != HOME_NODE, node.name.casefold(), node.name)


def build_tree(directory: Path, base_path: str = "") -> list[TreeNode]:
    """Build the tree of pages and folders below directory.

    Args:
        directory: Folder to scan.
        base_path: Page path of that folder, empty for the pages root.

    Returns:
        Sorted nodes for the immediate entries of directory, each with its
        children filled in.

    Raises:
        StorageError: If the top-level directory cannot be read.
    """
    try:
        entries = list(directory.iterdir())
    except FileNotFoundError:
        if base_path:
            return []
        raise StorageError(f"Pages directory not found: {directory}")
    except OSError as e:
        raise StorageError(f"Cannot read directory {directory}: {e}") from e

    md_files: set[str] = set()
    directories: set[str] = set()
    for entry in entries:
        if entry.name.startswith("."):
            continue
        if entry.is_dir():
            directories.add(entry.name)
        elif entry.name.endswith(PAGE_SUFFIX):
            md_files.add(entry.name.removesuffix(PAGE_SUFFIX))

    tree = []
    for name in md_files | directories:
        path = f"{base_path}/{name}" if base_path else name
        children: list[TreeNode] = []
        if name in directories:
            children = build_tree(directory / name, path)

        if name not in md_files:
            node_type = NodeType.FOLDER
        elif children:
            node_type = NodeType.PAGE_PARENT
        else:
            node_type = NodeType.PAGE

        tree.append(
            TreeNode(
                name=name,
                path=path,
                type=node_type,
                has_content=name in md_files,
                children=children,
            )
        )

    return sorted(tree, key=_sort_key)
