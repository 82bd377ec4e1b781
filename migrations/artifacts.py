#!/usr/bin/env python3
"""
Artifact resolution for compiled contracts

Reads the JSON artifacts produced by Truffle (build/contracts/<Name>.json) or
Hardhat (artifacts/contracts/<Source>.sol/<Name>.json). Only the ABI and the
creation bytecode are used.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .contracts import ContractKind
from .errors import ArtifactNotFound

logger = logging.getLogger(__name__)

DEFAULT_BUILD_DIRS = ("build/contracts", "artifacts")


@dataclass(frozen=True)
class Artifact:
    """Compiled, deployable representation of a contract"""
    kind: ContractKind
    contract_name: str
    abi: List[Dict[str, Any]] = field(repr=False)
    bytecode: str = field(repr=False)
    source_path: Optional[Path] = None


def _in_source_dir(parts: Tuple[str, ...], source_dir: str) -> bool:
    """True if the path parts contain source_dir (e.g. "tests") as consecutive components"""
    wanted = tuple(source_dir.split("/"))
    return any(parts[i:i + len(wanted)] == wanted for i in range(len(parts) - len(wanted) + 1))


class ArtifactStore:
    """Resolves contract kinds to artifacts found under one or more build directories"""

    def __init__(self, build_dirs: Optional[Sequence] = None):
        dirs = build_dirs if build_dirs else DEFAULT_BUILD_DIRS
        self.build_dirs = [Path(d) for d in dirs]
        self._cache: Dict[ContractKind, Artifact] = {}

    def path_for(self, kind: ContractKind) -> Path:
        """
        Find the artifact file for a contract kind

        Direct children of a build directory win over nested Hardhat paths.
        Among nested paths, one under the kind's source directory (fuzzing/, tests/)
        wins over a same-named contract elsewhere.
        Hardhat debug files (*.dbg.json) are never considered.

        Raises:
            ArtifactNotFound: no build directory holds the artifact
        """
        filename = f"{kind.contract_name}.json"
        for build_dir in self.build_dirs:
            if not build_dir.is_dir():
                continue
            direct = build_dir / filename
            if direct.is_file():
                return direct
            candidates = [c for c in sorted(build_dir.rglob(filename)) if c.is_file()]
            if not candidates:
                continue
            if kind.source_dir:
                for candidate in candidates:
                    if _in_source_dir(candidate.relative_to(build_dir).parent.parts, kind.source_dir):
                        return candidate
            return candidates[0]

        searched = ", ".join(str(d) for d in self.build_dirs)
        raise ArtifactNotFound(f"No artifact for {kind.artifact_name} (searched: {searched})")

    def load(self, kind: ContractKind) -> Artifact:
        """
        Load and validate the artifact for a contract kind

        Raises:
            ArtifactNotFound: file missing, unreadable, or without creation bytecode
        """
        if kind in self._cache:
            return self._cache[kind]

        path = self.path_for(kind)
        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise ArtifactNotFound(f"Could not read artifact {path}: {e}") from e

        abi = data.get('abi')
        if not isinstance(abi, list):
            raise ArtifactNotFound(f"Artifact {path} has no ABI")

        bytecode = data.get('bytecode')
        # Truffle emits the bytecode as a string, older solc-js outputs nest it under "object"
        if isinstance(bytecode, dict):
            bytecode = bytecode.get('object')
        if not isinstance(bytecode, str):
            raise ArtifactNotFound(f"Artifact {path} has no bytecode")
        if not bytecode.startswith("0x"):
            bytecode = "0x" + bytecode
        if bytecode == "0x":
            raise ArtifactNotFound(f"Artifact {path} has empty bytecode (abstract contract or interface?)")

        artifact = Artifact(
            kind=kind,
            contract_name=data.get('contractName', kind.contract_name),
            abi=abi,
            bytecode=bytecode,
            source_path=path,
        )
        logger.debug(f"Loaded artifact {artifact.contract_name} from {path}")
        self._cache[kind] = artifact
        return artifact
