"""
Copy-offload VIB reconciliation.

Ensures the vmkfstools-wrapper VIB on an ESXi host matches the desired
version, uploading and installing it when it does not.
"""

import logging
from typing import Optional

from migration_executor.config import ESXCLI_COMMAND_TIMEOUT, UPLOAD_TIMEOUT, VIB_LOCATION, VIB_NAME
from migration_executor.context import OperationContext, new_context
from migration_executor.errors import FaultKind, RemoteCallError, VibError, classify_fault, describe_fault
from migration_executor.vsphere.datacenter import entity_label, resolve_host_datacenter

logger = logging.getLogger(__name__)

VIB_FILE_NAME = f"{VIB_NAME}.vib"


def get_vib_version(client, esx_host, ctx: OperationContext) -> str:
    """
    Installed VIB version on the host, or "" when the VIB is not installed.

    Raises:
        EsxcliFault / RemoteCallError: any failure other than "not installed"
    """
    ctx.check()
    try:
        rows = client.run_esx_command(
            esx_host,
            ['software', 'vib', 'get', '-n', VIB_NAME],
            timeout=ctx.remaining(ESXCLI_COMMAND_TIMEOUT)
        )
    except RemoteCallError as e:
        if classify_fault(e) == FaultKind.NOT_FOUND:
            return ''
        raise

    ctx.log.debug(f"VIB get result: {rows}")
    if not rows:
        return ''
    return rows[0].value('Version')


def upload_vib(client, datacenter, datastore: str, ctx: OperationContext) -> str:
    """Upload the VIB to the datastore root; returns its /vmfs/volumes path"""
    ctx.check()
    return client.upload_file(
        datacenter,
        datastore,
        VIB_LOCATION,
        VIB_FILE_NAME,
        timeout=ctx.remaining(UPLOAD_TIMEOUT)
    )


def install_vib(client, esx_host, vib_path: str, ctx: OperationContext):
    """Install (force overwrite) the uploaded VIB"""
    ctx.check()
    rows = client.run_esx_command(
        esx_host,
        ['software', 'vib', 'install', '-f', '1', '-v', vib_path],
        timeout=ctx.remaining(ESXCLI_COMMAND_TIMEOUT)
    )
    ctx.log.debug(f"VIB install result: {rows}")


def _log_fault(ctx: OperationContext, step: str, error: Exception):
    info = describe_fault(error)
    ctx.log.error(f"VIB {step} failed: {info['title']}: {info['original_message']}")


def ensure_vib(client, esx_host, datastore: str, desired_version: str,
               ctx: Optional[OperationContext] = None):
    """
    Make sure the copy-offload VIB on an ESXi host is at desired_version.

    Does nothing when the reported version already matches. Otherwise
    uploads the VIB to the root of `datastore` and installs it. The
    installed version is not re-read afterwards.

    Args:
        client: VSphereClient (run_esx_command, upload_file)
        esx_host: vim.HostSystem
        datastore: Datastore name to stage the VIB on
        desired_version: Version string expected from `esxcli software vib get`
        ctx: Operation context; a fresh one tagged with the host is used if omitted

    Raises:
        VibError: query, upload or install failed
        HierarchyLookupError / DatacenterNotFoundError: datacenter lookup failed
        OperationCancelled / OperationTimedOut: caller aborted
    """
    host_name = entity_label(esx_host)
    if ctx is None:
        ctx = new_context('copy-offload/vib', host=host_name, base_logger=logger)
    else:
        ctx = ctx.with_values(operation='copy-offload/vib', host=host_name)

    ctx.log.info(f"Ensuring VIB version on ESXi, desired version {desired_version}")

    try:
        current_version = get_vib_version(client, esx_host, ctx)
    except RemoteCallError as e:
        _log_fault(ctx, 'query', e)
        raise VibError(f"failed to get the VIB version from ESXi {host_name}: {e}", host=host_name) from e

    ctx.log.info(f"Current VIB version on ESXi: {current_version or '(not installed)'}")
    if current_version == desired_version:
        return

    datacenter = resolve_host_datacenter(esx_host, ctx=ctx, host_name=host_name)

    try:
        vib_path = upload_vib(client, datacenter, datastore, ctx)
    except RemoteCallError as e:
        _log_fault(ctx, 'upload', e)
        raise VibError(
            f"failed to upload the VIB to ESXi {host_name} datastore [{datastore}]: {e}",
            host=host_name, datastore=datastore
        ) from e
    ctx.log.info(f"Uploaded VIB to {vib_path}")

    try:
        install_vib(client, esx_host, vib_path, ctx)
    except RemoteCallError as e:
        _log_fault(ctx, 'install', e)
        raise VibError(f"failed to install the VIB on ESXi {host_name}: {e}", host=host_name) from e
    ctx.log.info(f"Installed VIB version {desired_version}")
