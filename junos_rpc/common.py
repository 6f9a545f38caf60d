"""Common utilities: inventory loading, connection by inventory name, target resolution, parallel execution."""

from concurrent import futures
from jnpr.junos.exception import (
    ConnectAuthError,
    ConnectError,
    ConnectRefusedError,
    ConnectTimeoutError,
    ConnectUnknownHostError,
)
import configparser
import os
from logging import getLogger
from pathlib import Path

from junos_rpc import session as junos_session
from junos_rpc.exception import JunosRpcError, TransportError
from junos_rpc.transport import NETCONF_PORT

logger = getLogger(__name__)

DEFAULT_CONFIG = "config.ini"


def config_candidates() -> list[Path]:
    """Inventory locations in lookup order: ./config.ini, then XDG."""
    xdg = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
    return [Path(DEFAULT_CONFIG), Path(xdg) / "junos-rpc" / DEFAULT_CONFIG]


def get_default_config() -> str:
    """First existing inventory path, or ``config.ini`` if there is none."""
    for path in config_candidates():
        if path.is_file():
            logger.debug(f"get_default_config: {path}")
            return str(path)
    return DEFAULT_CONFIG


def read_config(path):
    """Read and parse the INI inventory file.

    :raises ValueError: no device section in the file
    """
    config = configparser.ConfigParser(allow_no_value=True)
    config.read(path)
    if len(config.sections()) == 0:
        raise ValueError(f"{path} is empty")
    for section in config.sections():
        if config.get(section, "host", fallback=None) is None:
            # host is [section] name
            config.set(section, "host", section)
        for key in config[section]:
            logger.debug(f"{section} > {key} : {config[section][key]}")
    return config


def _get_host_tags(config, section: str) -> set[str]:
    """Return the set of tags for a config section."""
    raw = config.get(section, "tags", fallback="")
    if not raw.strip():
        return set()
    return {t.strip().lower() for t in raw.split(",")}


def _filter_by_tags(config, required_tags: set[str]) -> list[str]:
    """Return sections whose tags are a superset of required_tags (AND)."""
    matched = []
    for section in config.sections():
        if required_tags <= _get_host_tags(config, section):
            matched.append(section)
    return matched


def get_targets(config, hosts=(), tags=None) -> list[str]:
    """Return target sections from explicit hosts, tags, or all sections.

    :raises KeyError: a host is not in the inventory
    :raises LookupError: tags matched nothing
    """
    for i in hosts:
        if not config.has_section(i):
            raise KeyError(f"{i} is not found in inventory")

    # タグ指定時: パースして AND フィルタ用の set を作成
    if tags is not None:
        required_tags = {t.strip().lower() for t in tags.split(",") if t.strip()}
    else:
        required_tags = set()

    # タグなし: hosts 指定があればそれだけ、なければ全セクション
    if not required_tags:
        if hosts:
            return list(dict.fromkeys(hosts))
        return config.sections()

    tag_matched = _filter_by_tags(config, required_tags)
    if not tag_matched and not hosts:
        raise LookupError(f"no hosts matched tags: {tags}")

    # タグマッチ分を先に、明示指定ホストを後に（重複排除）
    return list(dict.fromkeys([*tag_matched, *hosts]))


def connect(config, hostname):
    """Open a Session to an inventory host.

    :returns: ``(err, session)``; ``err`` is True and ``session`` None on failure
    """
    logger.debug(f"connect: {hostname} start")
    sshkey = config.get(hostname, "sshkey", fallback=None)
    kwargs = {}
    if config.has_option(hostname, "huge_tree"):
        kwargs["huge_tree"] = config.getboolean(hostname, "huge_tree")
    try:
        session = junos_session.connect(
            config.get(hostname, "host"),
            user=config.get(hostname, "id", fallback=None),
            password=config.get(hostname, "pw", fallback=None),
            port=config.getint(hostname, "port", fallback=NETCONF_PORT),
            ssh_private_key_file=sshkey or None,
            **kwargs,
        )
    except TransportError as e:
        cause = e.__cause__
        if isinstance(cause, ConnectAuthError):
            logger.error(f"{hostname}: Authentication credentials fail to login: {cause}")
        elif isinstance(cause, ConnectRefusedError):
            logger.error(f"{hostname}: NETCONF Connection refused: {cause}")
        elif isinstance(cause, ConnectTimeoutError):
            logger.error(f"{hostname}: Connection timeout: {cause}")
        elif isinstance(cause, ConnectUnknownHostError):
            logger.error(f"{hostname}: Unknown Host: {cause}")
        elif isinstance(cause, ConnectError):
            logger.error(f"{hostname}: Cannot connect to device: {cause}")
        else:
            logger.error(f"{hostname}: {e}")
        return True, None
    except JunosRpcError as e:
        logger.error(f"{hostname}: cannot gather facts: {e}")
        return True, None
    logger.debug(f"connect: {hostname} end")
    return False, session


def run_parallel(func, targets, max_workers=1) -> dict:
    """Call ``func(target)`` for every target.

    Each call is expected to open its own Session; sessions are never
    shared between threads. ``max_workers=1`` runs serially.

    :returns: ``{target: result}``; a call that raised maps to its
        exception instead, and the other targets still run
    """
    targets = list(targets)
    results = {}
    if max_workers <= 1:
        for target in targets:
            try:
                results[target] = func(target)
            except Exception as e:
                logger.error(f"{target}: {e!r}")
                results[target] = e
        return results

    with futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_target = {executor.submit(func, target): target for target in targets}
        for future in futures.as_completed(future_to_target):
            target = future_to_target[future]
            e = future.exception()
            if e is not None:
                logger.error(f"{target}: {e!r}")
                results[target] = e
            else:
                results[target] = future.result()
    # targets の順に並べ直す
    return {target: results[target] for target in targets}
