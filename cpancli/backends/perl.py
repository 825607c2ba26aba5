"""CPAN.pm driven through the ``perl`` executable.

Every capability is a short Perl program run with ``perl -MCPAN -e``.
Interactive work (the shell, installs, builds) inherits the terminal so
CPAN.pm talks to the user directly. Queries print one JSON document per
line, prefixed with a marker so CPAN.pm's own progress chatter on stdout
can be told apart from results.

When a configuration file was loaded with ``-j`` it is handed to Perl
through the environment and loaded with ``do`` before CPAN.pm looks for its own,
so the collaborator runs with exactly that configuration.
"""

from __future__ import annotations

import os
import json
import subprocess
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence

from cpancli.utils.logger import get_logger
from cpancli.core.options import ModuleAction
from cpancli.core.cpan_config import CpanConfig
from cpancli.backends.base import PackageManager
from cpancli.models import AuthorInfo, ModuleInfo
from cpancli.exceptions import BackendError
from cpancli.constants import DEFAULT_PERL

logger = get_logger("backends.perl")

#: Prefix of result lines printed by the query programs.
RESULT_MARKER = "CPANCLI\t"

#: Environment variable carrying the ``-j`` configuration file to Perl.
CONFIG_ENV = "CPANCLI_CONFIG"

_PREAMBLE = r"""
use strict;
use warnings;
my $cpancli_config = $ENV{CPANCLI_CONFIG};
if ($cpancli_config) {
    $CPAN::Config = {};
    do $cpancli_config or die "Could not load [$cpancli_config]: " . ($@ || $!) . "\n";
    $INC{'CPAN/MyConfig.pm'} = 'cpancli';
    $CPAN::Config_loaded = 1;
}
else {
    CPAN::HandleConfig->load(be_silent => 1, write_file => 0);
}
"""

_EMIT = r"""
use JSON::PP ();
my $json = JSON::PP->new->canonical->allow_nonref;
sub emit { print "CPANCLI\t", $json->encode($_[0]), "\n" }
sub module_record {
    my $m = shift;
    return undef unless $m;
    return {
        id           => $m->id,
        userid       => $m->userid,
        description  => $m->description,
        cpan_file    => $m->cpan_file,
        inst_file    => $m->inst_file,
        inst_version => $m->inst_version,
        cpan_version => $m->cpan_version,
        uptodate     => ($m->uptodate ? JSON::PP::true : JSON::PP::false),
    };
}
"""

_SCRIPTS: Dict[str, str] = {
    "version": _EMIT + r"""
emit("" . CPAN->VERSION);
""",
    "can": r"""
exit(CPAN::Shell->can($ARGV[0]) ? 0 : 1);
""",
    "shell": _PREAMBLE + r"""
CPAN::shell();
""",
    "action": _PREAMBLE + r"""
my ($method, $force, $module) = @ARGV;
if ($force) { CPAN::Shell->force($method, $module) }
else        { CPAN::Shell->$method($module) }
my $failed = CPAN::Shell->can('mandatory_dist_failed')
    ? CPAN::Shell->mandatory_dist_failed : 0;
exit($failed ? 1 : 0);
""",
    "autobundle": _PREAMBLE + r"""
CPAN::Shell->autobundle;
""",
    "recompile": _PREAMBLE + r"""
CPAN::Shell->recompile;
""",
    "module": _PREAMBLE + _EMIT + r"""
emit(module_record(scalar CPAN::Shell->expand("Module", $ARGV[0])));
""",
    "author": _PREAMBLE + _EMIT + r"""
my $author = CPAN::Shell->expand("Author", $ARGV[0]);
emit($author
    ? { id => $author->id, fullname => $author->fullname, email => $author->email }
    : undef);
""",
    "all_modules": _PREAMBLE + _EMIT + r"""
emit(module_record($_)) for CPAN::Shell->expand("Module", "/./");
""",
    "inc": _EMIT + r"""
emit([ grep { !ref } @INC ]);
""",
}


class PerlCpanBackend(PackageManager):
    """Collaborator implementation backed by CPAN.pm.

    Args:
        perl: Perl interpreter to run.
        config: Active CPAN configuration.
    """

    def __init__(self, perl: str = DEFAULT_PERL, config: Optional[CpanConfig] = None) -> None:
        super().__init__(config)
        self.perl = perl

    # ------------------------------------------------------------------
    # Process plumbing
    # ------------------------------------------------------------------

    def _command(self, script: str, args: Sequence[str]) -> List[str]:
        return [self.perl, "-MCPAN", "-e", _SCRIPTS[script], "--", *args]

    def _env(self) -> Dict[str, str]:
        env = dict(os.environ)
        env.pop(CONFIG_ENV, None)
        if self.config.explicit and self.config.source_path is not None:
            env[CONFIG_ENV] = str(Path(self.config.source_path).resolve())
        return env

    def _run(
        self,
        script: str,
        *args: str,
        capture: bool = False,
    ) -> subprocess.CompletedProcess:
        command = self._command(script, args)
        logger.debug("Running %s %s %s", self.perl, script, " ".join(args))
        try:
            return subprocess.run(
                command,
                env=self._env(),
                check=False,
                text=True,
                capture_output=capture,
            )
        except OSError as exc:
            raise BackendError(
                f"Cannot run {self.perl}: {exc.strerror or exc}",
                command=self.perl,
            ) from exc

    def _query(self, script: str, *args: str) -> List[Any]:
        """Run a query program and return its decoded result lines."""
        result = self._run(script, *args, capture=True)
        if result.returncode != 0:
            raise BackendError(
                f"{self.name} query '{script}' failed",
                command=f"{self.perl} -MCPAN ({script})",
                returncode=result.returncode,
                stderr=result.stderr,
            )

        values: List[Any] = []
        for line in result.stdout.splitlines():
            if not line.startswith(RESULT_MARKER):
                continue
            payload = line[len(RESULT_MARKER) :]
            try:
                values.append(json.loads(payload))
            except ValueError:
                logger.debug("Skipping malformed result line: %r", payload)
                continue
        return values

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def version(self) -> str:
        values = self._query("version")
        return str(values[0]) if values else "unknown"

    def shell(self) -> int:
        return self._run("shell").returncode

    # ------------------------------------------------------------------
    # Module actions
    # ------------------------------------------------------------------

    def supports(self, action: ModuleAction) -> bool:
        return self._run("can", action.method, capture=True).returncode == 0

    def run_action(self, action: ModuleAction, module: str, *, force: bool = False) -> bool:
        result = self._run("action", action.method, "1" if force else "0", module)
        if result.returncode != 0:
            logger.info("%s %s exited with status %d", action.method, module, result.returncode)
        return result.returncode == 0

    def autobundle(self) -> bool:
        return self._run("autobundle").returncode == 0

    def recompile(self) -> bool:
        return self._run("recompile").returncode == 0

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def expand_module(self, name: str) -> Optional[ModuleInfo]:
        values = self._query("module", name)
        if not values or not isinstance(values[0], dict):
            return None
        return ModuleInfo.from_mapping(values[0])

    def expand_author(self, author_id: str) -> Optional[AuthorInfo]:
        values = self._query("author", author_id)
        if not values or not isinstance(values[0], dict):
            return None
        return AuthorInfo.from_mapping(values[0])

    def all_modules(self) -> Iterator[ModuleInfo]:
        for value in self._query("all_modules"):
            if isinstance(value, dict):
                yield ModuleInfo.from_mapping(value)

    def module_search_path(self) -> List[Path]:
        values = self._query("inc")
        if not values or not isinstance(values[0], list):
            return []
        return [Path(entry) for entry in values[0] if entry]
