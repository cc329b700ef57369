"""Backend-aware provisioning plans for storage node instances.

A storage node can run on raw devices, on host directories or without any
media (config only), with a file-based or object-based store format and an
optional dedicated metadata device. Rather than branching on those options
wherever volumes and command lines are assembled, the planner resolves them
once into a StorageBackendPlan that the resource builder consumes as-is.
"""

import posixpath
from dataclasses import dataclass
from typing import Optional, Tuple

from ..core.enums import MediaKind, StoreFormat
from ..core.errors import ValidationError
from ..core.log import Logger
from ..core.specs import MediaSelection, StoreSettings
from .naming import path_to_volume_name

# Data directory inside every storage container. The fleet's host data path
# is always mounted here.
CONTAINER_DATA_DIR = "/var/lib/flotilla"

DEVICES_VOLUME = "devices"
UDEV_VOLUME = "udev"
USE_ALL_DEVICES_FILTER = "all"


@dataclass(frozen=True)
class SizeHints:
    """Optional size hints in megabytes, 0 meaning unset."""

    database_size_mb: int = 0
    wal_size_mb: int = 0
    journal_size_mb: int = 0


@dataclass(frozen=True)
class HostMount:
    """A host path mounted into the instance's containers at the same path."""

    volume_name: str
    host_path: str

    @property
    def mount_path(self) -> str:
        return self.host_path


_DEVICE_MOUNTS = (
    HostMount(volume_name=DEVICES_VOLUME, host_path="/dev"),
    HostMount(volume_name=UDEV_VOLUME, host_path="/run/udev"),
)


@dataclass(frozen=True)
class StorageBackendPlan:
    """Resolved media, store format and mount requirements of a storage node.

    Exactly one media kind applies. The metadata device is independent of the
    media kind and may combine with any of them.
    """

    store_format: StoreFormat
    media_kind: MediaKind
    metadata_device: Optional[str] = None
    size_hints: SizeHints = SizeHints()
    devices: Tuple[str, ...] = ()
    device_filter: Optional[str] = None
    directories: Tuple[str, ...] = ()
    host_mounts: Tuple[HostMount, ...] = ()
    default_data_dir: str = CONTAINER_DATA_DIR

    @property
    def needs_device_mounts(self) -> bool:
        """Raw devices and metadata devices need /dev and udev from the host."""
        return self.media_kind == MediaKind.RAW_DEVICE or bool(self.metadata_device)

    @property
    def needs_binary_staging(self) -> bool:
        """Whether the launcher binaries must be staged for the daemon.

        File-based stores on raw devices have the launcher mount the
        partition, run the daemon and unmount on exit. Every other
        combination runs the daemon binary directly.
        """
        return (
            self.media_kind == MediaKind.RAW_DEVICE
            and self.store_format == StoreFormat.FILE_BASED
        )

    def data_path_for(self, identity: str) -> str:
        """Data path of one instance inside its containers."""
        if self.media_kind == MediaKind.DIRECTORY:
            return posixpath.join(self.directories[0], identity)
        return posixpath.join(self.default_data_dir, identity)


class StorageBackendPlanner:
    """Derives a StorageBackendPlan from the store and media settings.

    Media selectors are honored in priority order: explicit device list,
    device filter expression, use-all-devices flag, explicit directory list,
    config-only mode. Only the highest-priority selector that is set is
    used; the rest are ignored.
    """

    def __init__(
        self, logger: Optional[Logger] = None, default_data_dir: str = CONTAINER_DATA_DIR
    ) -> None:
        self._logger = logger
        self._default_data_dir = default_data_dir.rstrip("/") or "/"

    def plan(
        self,
        store: StoreSettings,
        selection: MediaSelection,
        metadata_device: Optional[str] = None,
    ) -> StorageBackendPlan:
        """Resolve the provisioning plan for one storage fleet.

        Args:
            store: Store format and size hints
            selection: Media selectors
            metadata_device: Optional dedicated metadata device

        Returns:
            StorageBackendPlan

        Raises:
            ValidationError: If no medium resolves and config-only mode is not set
            ValidationError: If a selected directory is not an absolute path
        """
        devices: Tuple[str, ...] = ()
        device_filter: Optional[str] = None
        directories: Tuple[str, ...] = ()

        # Blank entries do not make a selector non-empty
        selected_devices = tuple(d.strip() for d in selection.devices if d.strip())
        selected_filter = (selection.device_filter or "").strip()
        selected_dirs = [d.strip() for d in selection.directories if d.strip()]

        if selected_devices:
            media_kind = MediaKind.RAW_DEVICE
            devices = selected_devices
        elif selected_filter:
            media_kind = MediaKind.RAW_DEVICE
            device_filter = selected_filter
        elif selection.use_all_devices:
            media_kind = MediaKind.RAW_DEVICE
            device_filter = USE_ALL_DEVICES_FILTER
        elif selected_dirs:
            relative = [d for d in selected_dirs if not posixpath.isabs(d)]
            if relative:
                raise ValidationError(
                    f"directories must be absolute paths: {', '.join(relative)}",
                    details={"directories": relative},
                )
            media_kind = MediaKind.DIRECTORY
            directories = tuple(d.rstrip("/") or "/" for d in selected_dirs)
        elif selection.config_only:
            media_kind = MediaKind.NO_MEDIA
        else:
            raise ValidationError(
                "empty volumes", details={"selection": selection.model_dump()}
            )

        plan = StorageBackendPlan(
            store_format=store.format,
            media_kind=media_kind,
            metadata_device=metadata_device or None,
            size_hints=SizeHints(
                database_size_mb=store.database_size_mb,
                wal_size_mb=store.wal_size_mb,
                journal_size_mb=store.journal_size_mb,
            ),
            devices=devices,
            device_filter=device_filter,
            directories=directories,
            host_mounts=self._host_mounts(media_kind, directories, metadata_device),
            default_data_dir=self._default_data_dir,
        )

        if self._logger:
            self._logger.debug(
                "Storage plan: %s on %s (staging=%s, device mounts=%s, host mounts=%d)",
                plan.store_format.value,
                plan.media_kind.value,
                plan.needs_binary_staging,
                plan.needs_device_mounts,
                len(plan.host_mounts),
            )
        return plan

    def _host_mounts(
        self,
        media_kind: MediaKind,
        directories: Tuple[str, ...],
        metadata_device: Optional[str],
    ) -> Tuple[HostMount, ...]:
        mounts = []
        if media_kind == MediaKind.RAW_DEVICE or metadata_device:
            mounts.extend(_DEVICE_MOUNTS)
        for directory in directories:
            # The default data directory is already provided by the base data volume
            if directory == self._default_data_dir:
                continue
            mounts.append(
                HostMount(volume_name=path_to_volume_name(directory), host_path=directory)
            )
        return tuple(mounts)
