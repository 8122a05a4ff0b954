"""High level dex queries returning parsed records.

This is the boundary where invocation and parse failures stop: every query
logs the failure and returns an empty collection or a default record, so
callers rendering results never see an exception.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

from modiqo.config import DexSettings, load_settings
from modiqo.constants import DEFAULT_COMMUNITY, VAULT_PASSPHRASE_ENV
from modiqo.models import (
    Adapter,
    CatalogCategory,
    CatalogResult,
    DexInfo,
    DryRunResult,
    ExploreResult,
    ExploreSkillMatch,
    ExploreToolMatch,
    Flow,
    FlowSearchMatch,
    RegistryAdapter,
    RegistrySkill,
    RegistryWhoami,
    TokenInfo,
    VaultToken,
)
from modiqo.parsers import ParserError, get_parser
from modiqo.runner import DexCommandError, DexRunner

logger = logging.getLogger("modiqo.client")

T = TypeVar("T")


class DexClient:
    """Typed access to the dex CLI."""

    def __init__(self, settings: DexSettings | None = None, runner: DexRunner | None = None):
        self.settings = settings or (runner.settings if runner else load_settings())
        self._runner = runner or DexRunner(self.settings)

    def refresh_settings(self) -> None:
        """Re-read settings from the environment, e.g. after the dex path changed."""

        self.settings = load_settings()
        self._runner = DexRunner(self.settings)

    async def exec_text(self, args: Sequence[str], *, timeout_seconds: int | None = None) -> str:
        output = await self._runner.run(args, timeout_seconds=timeout_seconds)
        return output.text

    async def exec_silent(self, args: Sequence[str]) -> bool:
        try:
            await self._runner.run(args)
        except DexCommandError as exc:
            logger.debug("%s", exc)
            return False
        return True

    async def _query(
        self,
        args: Sequence[str],
        parser_name: str,
        default: Callable[[], T],
        *,
        timeout_seconds: int | None = None,
    ) -> T:
        parser = get_parser(parser_name)
        try:
            text = await self.exec_text(args, timeout_seconds=timeout_seconds)
            return parser.parse(text)
        except (DexCommandError, ParserError) as exc:
            logger.warning("dex %s: returning empty result (%s)", " ".join(args), exc)
            return default()

    # ------------------------------------------------------------------
    # Local install
    # ------------------------------------------------------------------

    async def is_available(self) -> bool:
        """dex counts as installed when its bundled deno runtime exists and ``--version`` runs."""

        if not self.settings.deno_path.exists():
            return False
        return await self.exec_silent(["--version"])

    async def dex_info(self) -> DexInfo:
        return await self._query(["info"], "dex_info", DexInfo)

    async def adapter_list(self) -> list[Adapter]:
        return await self._query(["adapter", "list"], "adapter_table", list)

    async def flow_list(self) -> list[Flow]:
        return await self._query(["flow", "list", "--json"], "flow_list_json", list)

    async def token_list(self) -> list[TokenInfo]:
        return await self._query(["token", "list"], "token_list", list)

    async def vault_token_list(self) -> list[VaultToken]:
        return await self._query(["token", "list"], "vault_token_table", list)

    async def is_setup_complete(self) -> bool:
        adapters, tokens = await asyncio.gather(self.adapter_list(), self.token_list())
        return bool(adapters) and any(token.configured for token in tokens)

    async def token_set(self, env_var: str, value: str) -> bool:
        """Store a token; the value goes over stdin so it never shows up in argv."""

        try:
            await self._runner.run(["token", "set", env_var], input_text=value)
        except DexCommandError as exc:
            logger.warning("Failed to set token %s: %s", env_var, exc)
            return False
        return True

    async def vault_pull(self, passphrase: str) -> bool:
        try:
            await self._runner.run(["vault", "pull"], env={VAULT_PASSPHRASE_ENV: passphrase})
        except DexCommandError as exc:
            logger.warning("Vault pull failed: %s", exc)
            return False
        return True

    async def verify_adapter(self, adapter_id: str) -> bool:
        return await self.exec_silent(["deno", "run", "--allow-all", f"bootstrap/{adapter_id}", "--output=summary"])

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    async def catalog_list(self) -> list[CatalogCategory]:
        return await self._query(["adapter", "catalog", "list"], "catalog_list", list)

    async def catalog_search(self, query: str) -> list[CatalogResult]:
        return await self._query(["adapter", "catalog", "search", query], "catalog_search", list)

    async def catalog_info(self, adapter_id: str) -> dict[str, str]:
        return await self._query(["adapter", "catalog", "info", adapter_id], "catalog_info", dict)

    async def adapter_dry_run(self, adapter_id: str, spec_url: str, *, base_url: str | None = None) -> DryRunResult:
        """Analyse a spec without installing anything.

        Unlike the listing queries this raises :class:`DexCommandError`, since the
        caller has to show why the analysis failed.
        """

        args = ["adapter", "new", adapter_id, spec_url, "--dry-run"]
        if base_url:
            args.extend(["--base-url", base_url])
        text = await self.exec_text(args, timeout_seconds=self.settings.dry_run_timeout_seconds)
        try:
            return get_parser("dry_run_json").parse(text)
        except ParserError as exc:
            raise DexCommandError(f"dry-run failed: {exc}", returncode=0, stdout=text) from exc

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    async def registry_whoami(self) -> RegistryWhoami:
        return await self._query(["registry", "whoami", "--verbose"], "whoami", RegistryWhoami)

    async def registry_adapter_list(self, community: str = DEFAULT_COMMUNITY) -> list[RegistryAdapter]:
        args = ["registry", "adapter", "list", "--community", community]
        return await self._query(args, "registry_adapter_table", list)

    async def registry_skill_list(self, community: str = DEFAULT_COMMUNITY) -> list[RegistrySkill]:
        args = ["registry", "skill", "list", "--community", community]
        return await self._query(args, "registry_skill_table", list)

    async def skill_search_names(self, adapter_id: str) -> list[str]:
        return await self._query(["registry", "skill", "search", adapter_id], "skill_search_names", list)

    async def pull_associated_skills(self, adapter_id: str, community: str = DEFAULT_COMMUNITY) -> int:
        """Pull every skill the registry associates with ``adapter_id``; returns how many succeeded."""

        pulled = 0
        for name in await self.skill_search_names(adapter_id):
            try:
                await self._runner.run(["registry", "skill", "pull", f"{community}/{name}"], input_text="y\n")
            except DexCommandError as exc:
                logger.info("Skipping skill %s: %s", name, exc)
                continue
            pulled += 1
        return pulled

    # ------------------------------------------------------------------
    # Explore / search
    # ------------------------------------------------------------------

    async def flow_search(self, query: str) -> list[FlowSearchMatch]:
        return await self._query(["flow", "search", query], "flow_search", list)

    async def explore_tools(self, query: str) -> list[ExploreToolMatch]:
        return await self._query(["explore", query, "--json"], "explore_tools_json", list)

    async def explore_skills(self, query: str) -> list[ExploreSkillMatch]:
        return await self._query(["explore", query], "explore_skills", list)

    async def explore(self, query: str) -> ExploreResult:
        """Run the tool, skill and flow searches concurrently and join them."""

        results: tuple[Any, ...] = await asyncio.gather(
            self.explore_tools(query),
            self.explore_skills(query),
            self.flow_search(query),
        )
        tools, skills, flows = results
        return ExploreResult(query=query, tools=tools, skills=skills, flowSearchResults=flows)
