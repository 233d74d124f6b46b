"""vSphere client: vCenter session, datastore uploads and esxcli dispatch"""

import logging
import os
import ssl
from typing import Dict, List, Optional
from urllib.parse import quote

import requests
from pyVim.connect import SmartConnect, Disconnect
from pyVmomi import vim, vmodl

from migration_executor.config import (
    DATASTORE_VOLUMES_ROOT,
    ESXCLI_COMMAND_TIMEOUT,
    ESXI_SSH_PASSWORD,
    ESXI_SSH_TIMEOUT,
    ESXI_SSH_USER,
    UPLOAD_TIMEOUT,
    VCENTER_HOST,
    VCENTER_PASSWORD,
    VCENTER_PORT,
    VCENTER_USER,
    VERIFY_SSL,
)
from migration_executor.errors import RemoteCallError
from migration_executor.esxi.ssh_client import EsxcliRow, EsxiSshClient

logger = logging.getLogger(__name__)


def datastore_path(datastore_name: str, file_name: str) -> str:
    """Path of a datastore-root file as seen from the ESXi shell"""
    return f"{DATASTORE_VOLUMES_ROOT}/{datastore_name}/{file_name}"


class VSphereClient:
    """
    Holds a vCenter session and per-host SSH clients.

    Args:
        host: vCenter hostname or IP
        user: vCenter username
        password: vCenter password
        port: vCenter port
        verify_ssl: Whether to verify SSL certificates
        ssh_user: ESXi SSH username used for esxcli
        ssh_password: ESXi SSH password used for esxcli
    """

    def __init__(self, host: str = VCENTER_HOST, user: str = VCENTER_USER,
                 password: str = VCENTER_PASSWORD, port: int = VCENTER_PORT,
                 verify_ssl: bool = VERIFY_SSL, ssh_user: str = ESXI_SSH_USER,
                 ssh_password: str = ESXI_SSH_PASSWORD):
        self.host = host
        self.user = user
        self.password = password
        self.port = port
        self.verify_ssl = verify_ssl
        self.ssh_user = ssh_user
        self.ssh_password = ssh_password
        self.si = None
        self._ssh_clients: Dict[str, EsxiSshClient] = {}

    def connect(self):
        """Open the vCenter session if not already open"""
        if self.si is not None:
            return self.si

        context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
        if not self.verify_ssl:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE

        logger.info(f"Connecting to vCenter at {self.host}...")
        try:
            self.si = SmartConnect(
                host=self.host,
                user=self.user,
                pwd=self.password,
                port=self.port,
                sslContext=context
            )
        except (vmodl.MethodFault, OSError) as e:
            raise RemoteCallError(f"failed to connect to vCenter {self.host}: {e}") from e
        logger.info(f"Connected to vCenter at {self.host}")
        return self.si

    def disconnect(self):
        """Close the vCenter session and every SSH client"""
        for ssh_client in self._ssh_clients.values():
            ssh_client.disconnect()
        self._ssh_clients.clear()
        if self.si is not None:
            Disconnect(self.si)
            self.si = None

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.disconnect()

    # =========================================================================
    # esxcli
    # =========================================================================

    def _ssh_client_for(self, host_name: str) -> EsxiSshClient:
        ssh_client = self._ssh_clients.get(host_name)
        if ssh_client is None:
            ssh_client = EsxiSshClient(host_name, self.ssh_user, self.ssh_password, timeout=ESXI_SSH_TIMEOUT)
            self._ssh_clients[host_name] = ssh_client
        return ssh_client

    def run_esx_command(self, esx_host, args: List[str],
                        timeout: Optional[float] = ESXCLI_COMMAND_TIMEOUT) -> List[EsxcliRow]:
        """
        Run an esxcli command on an ESXi host.

        Args:
            esx_host: vim.HostSystem (its name is used as the SSH address)
            args: esxcli arguments
            timeout: Command timeout in seconds

        Raises:
            EsxcliFault: the command ran and failed
            RemoteCallError: the host could not be reached
        """
        return self._ssh_client_for(esx_host.name).run_esxcli(args, timeout=timeout)

    # =========================================================================
    # Datastores
    # =========================================================================

    def get_datastore(self, datacenter, datastore_name: str):
        """
        Find a datastore by name within a datacenter, including StoragePods
        and nested folders.

        Raises:
            RemoteCallError: the datastore is not present or lookup failed
        """
        def search_folder(folder, depth=0):
            if depth > 10:
                return None
            for item in folder.childEntity:
                if isinstance(item, vim.Datastore):
                    if item.name == datastore_name:
                        return item
                elif hasattr(item, 'childEntity'):
                    found = search_folder(item, depth + 1)
                    if found:
                        return found
            return None

        try:
            for ds in datacenter.datastore:
                if ds.name == datastore_name:
                    return ds
            ds = search_folder(datacenter.datastoreFolder)
            if ds is None:
                raise RemoteCallError(
                    f"datastore {datastore_name} not found in datacenter {datacenter.name}",
                    datastore=datastore_name
                )
        except vmodl.MethodFault as e:
            raise RemoteCallError(
                f"failed to look up datastore {datastore_name}: {e.msg}", datastore=datastore_name
            ) from e
        return ds

    def _session_cookie(self) -> Dict[str, str]:
        # vmware_soap_session="..."; Path=/; HttpOnly; Secure;
        raw = self.si._stub.cookie
        name, _, rest = raw.partition('=')
        value = rest.split(';', 1)[0]
        return {name.strip(): value}

    @staticmethod
    def _datacenter_path(datacenter) -> str:
        # Inventory path below the root folder, e.g. "Region/DC1"
        names = [datacenter.name]
        parent = datacenter.parent
        while parent is not None and parent.parent is not None:
            names.insert(0, parent.name)
            parent = parent.parent
        return '/'.join(names)

    def upload_file(self, datacenter, datastore_name: str, local_path: str,
                    remote_name: str, timeout: Optional[float] = UPLOAD_TIMEOUT) -> str:
        """
        Upload a local file to the root of a datastore through vCenter's
        /folder HTTP endpoint.

        Args:
            datacenter: vim.Datacenter owning the datastore
            datastore_name: Datastore name
            local_path: Local file to upload
            remote_name: File name at the datastore root
            timeout: Request timeout in seconds

        Returns:
            Path of the uploaded file as seen from ESXi,
            e.g. /vmfs/volumes/ds1/file.vib

        Raises:
            RemoteCallError: lookup, local read or upload failed; carries
                the datastore name and the target path
        """
        self.connect()
        ds = self.get_datastore(datacenter, datastore_name)
        target = datastore_path(datastore_name, remote_name)
        url = f"https://{self.host}:{self.port}/folder/{quote(remote_name)}"

        logger.info(f"Uploading {local_path} to [{datastore_name}] {remote_name}")
        try:
            params = {
                'dcPath': self._datacenter_path(datacenter),
                'dsName': ds.name,
            }
            headers = {
                'Content-Type': 'application/octet-stream',
                'Content-Length': str(os.path.getsize(local_path)),
            }
            with open(local_path, 'rb') as f:
                response = requests.put(
                    url,
                    params=params,
                    data=f,
                    headers=headers,
                    cookies=self._session_cookie(),
                    verify=self.verify_ssl,
                    timeout=timeout
                )
            response.raise_for_status()
        except (requests.RequestException, vmodl.MethodFault, OSError) as e:
            raise RemoteCallError(
                f"failed to upload {local_path} to {target}: {e}", datastore=datastore_name
            ) from e
        return target
