"""NFS server configuration for export gateway instances.

Each gateway gets its own document. The final line points the server at its
per-instance configuration object in the recovery pool:

    %url	rados://<pool>/<namespace>/conf-<identity>

The server loads that object on first start, or creates it when absent, so
exports added later through the object survive restarts.
"""

from typing import List

from ..core.enums import GatewayStoreType
from ..core.specs import ExportSpec, GatewayFleetSpec

CEPH_CONF_PATH = "/etc/ceph/ceph.conf"
RADOS_USER_ID = "admin"
GATEWAY_CONFIG_KEY = "config"
GATEWAY_CONFIG_FILE = "ganesha.conf"
GATEWAY_CONFIG_DIR = "/etc/ganesha"

_FSAL_NAMES = {
    GatewayStoreType.FILE: "CEPH",
    GatewayStoreType.OBJECT: "RGW",
}


def recovery_url(pool: str, namespace: str, identity: str) -> str:
    """URL of an instance's configuration object in the recovery pool."""
    return f"rados://{pool}/{namespace}/conf-{identity}"


def _block(name: str, lines: List[str]) -> List[str]:
    return [f"{name} {{"] + [f"\t{line}" for line in lines] + ["}"]


def _export_block(export_id: int, export: ExportSpec, store_type: GatewayStoreType,
                  store_name: str) -> List[str]:
    body = [
        f"Export_ID = {export_id};",
        f'Path = "{export.path}";',
        f'Pseudo = "{export.pseudo_path}";',
        f"Access_Type = {export.access_type};",
        f"Squash = {export.squash};",
        "Protocols = 4;",
        "Transports = TCP;",
    ]
    if export.allowed_clients:
        body.extend(
            _block(
                "CLIENT",
                [
                    f"Clients = {', '.join(export.allowed_clients)};",
                    f"Access_Type = {export.access_type};",
                ],
            )
        )
    fsal = [f"Name = {_FSAL_NAMES[store_type]};"]
    if store_type == GatewayStoreType.OBJECT:
        fsal.append(f'User_Id = "{store_name}";')
    else:
        fsal.append(f'Filesystem = "{store_name}";')
    body.extend(_block("FSAL", fsal))
    return _block("EXPORT", body)


def render_gateway_config(fleet: GatewayFleetSpec, identity: str) -> str:
    """Render the NFS server configuration for one gateway instance.

    Args:
        fleet: Validated gateway fleet specification
        identity: Instance identity, used as the recovery node id

    Returns:
        Configuration document text, newline terminated
    """
    pool = fleet.client_recovery.pool
    namespace = fleet.client_recovery.namespace
    url = recovery_url(pool, namespace, identity)
    store_type = GatewayStoreType(fleet.store.type)

    sections: List[List[str]] = [
        _block(
            "NFS_CORE_PARAM",
            ["Enable_NLM = false;", "Enable_RQUOTA = false;", "Protocols = 4;"],
        ),
        _block("NFSv4", ["RecoveryBackend = rados_cluster;", "Minor_Versions = 1, 2;"]),
        _block(
            "RADOS_KV",
            [
                f'ceph_conf = "{CEPH_CONF_PATH}";',
                f"userid = {RADOS_USER_ID};",
                f"nodeid = {identity};",
                f'pool = "{pool}";',
                f'namespace = "{namespace}";',
            ],
        ),
        _block(
            "RADOS_URLS",
            [
                f'ceph_conf = "{CEPH_CONF_PATH}";',
                f"userid = {RADOS_USER_ID};",
                f'watch_url = "{url}";',
            ],
        ),
    ]
    for export_id, export in enumerate(fleet.exports, start=1):
        sections.append(_export_block(export_id, export, store_type, fleet.store.name))

    lines: List[str] = []
    for section in sections:
        lines.extend(section)
        lines.append("")
    lines.append(f"%url\t{url}")
    return "\n".join(lines) + "\n"
