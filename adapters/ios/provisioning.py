# adapters/ios/provisioning.py
# -*- coding: utf-8 -*-
from __future__ import annotations
import filecmp
import os
from typing import List

from contracts.base import Command
from contracts.errors import CommandFailed, ProvisioningProfileNotEmbedded, ProvisioningProfileNotFound
from engine.audit_log import record_event


class ProvisionResolver:
    """
    Looks up provisioning profiles in the per-user profile store.
    The newest matching file (by mtime) wins.
    """

    def __init__(self, executor, profile_store: str):
        self.executor = executor
        self.profile_store = profile_store

    def search_command(self, query: str) -> Command:
        return Command.of("grep", "-rlZ", "--", query, self.profile_store)

    def candidates(self, query: str) -> List[str]:
        if not os.path.isdir(self.profile_store):
            return []
        cmd = self.search_command(query)
        res = self.executor.run(cmd)
        # grep: 0 match, 1 no match, >1 error
        if res.returncode > 1:
            raise CommandFailed(cmd.render(), res.returncode, res.output)
        paths = [p.strip("\n") for p in res.output.split("\0")]
        found = [p for p in paths if p and os.path.isfile(p)]
        return sorted(found, key=os.path.getmtime, reverse=True)

    def resolve(self, query: str) -> str:
        found = self.candidates(query)
        if not found:
            raise ProvisioningProfileNotFound(query, self.search_command(query).render())
        record_event("provision.resolved", {"query": query, "path": found[0], "candidates": len(found)})
        return found[0]

    def verify(self, embedded_path: str, query: str) -> str:
        expected = self.resolve(query)
        if not os.path.isfile(embedded_path) or not filecmp.cmp(embedded_path, expected, shallow=False):
            record_event("provision.mismatch", {"embedded": embedded_path, "expected": expected}, severity="error")
            raise ProvisioningProfileNotEmbedded(embedded_path, expected)
        return expected
