"""
ESXi SSH Client using Paramiko
Runs esxcli on ESXi hosts and returns row-structured results
"""
import csv
import io
import logging
import shlex
from typing import Dict, List, Optional, Tuple

import paramiko

from migration_executor.config import ESXCLI_COMMAND_TIMEOUT, ESXI_SSH_TIMEOUT
from migration_executor.errors import EsxcliFault, RemoteCallError

logger = logging.getLogger(__name__)


class EsxcliRow:
    """One row of esxcli output with named-field lookup"""

    def __init__(self, fields: Dict[str, str]):
        self.fields = fields

    def value(self, name: str) -> str:
        return self.fields.get(name, '')

    def __repr__(self):
        return f"EsxcliRow({self.fields!r})"


def parse_csv_output(output: str) -> List[EsxcliRow]:
    """
    Parse `esxcli --formatter=csv` output.

    esxcli terminates every line with a trailing comma, which shows up as
    an empty column name; those columns are dropped.
    """
    text = output.strip()
    if not text:
        return []

    rows = []
    for record in csv.DictReader(io.StringIO(text)):
        fields = {
            key.strip(): (val or '').strip()
            for key, val in record.items()
            if key and key.strip()
        }
        if any(fields.values()):
            rows.append(EsxcliRow(fields))
    return rows


class EsxiSshClient:
    """SSH client for ESXi host operations"""

    def __init__(self, host: str, username: str = 'root', password: str = '', timeout: int = ESXI_SSH_TIMEOUT):
        """
        Initialize ESXi SSH client

        Args:
            host: ESXi management address (as named in vCenter)
            username: SSH username (default: root)
            password: SSH password
            timeout: Connection timeout in seconds
        """
        self.host = host
        self.username = username
        self.password = password
        self.timeout = timeout
        self.client: Optional[paramiko.SSHClient] = None

    def connect(self):
        """
        Establish SSH connection to ESXi host

        Raises:
            RemoteCallError: if the connection or authentication fails
        """
        try:
            self.client = paramiko.SSHClient()
            self.client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
            self.client.connect(
                hostname=self.host,
                username=self.username,
                password=self.password,
                timeout=self.timeout,
                allow_agent=False,
                look_for_keys=False
            )
        except (paramiko.SSHException, OSError) as e:
            self.client = None
            raise RemoteCallError(f"SSH connection failed to {self.host}: {e}", host=self.host) from e
        logger.debug(f"[ESXi SSH] Connected to {self.host}")

    def disconnect(self):
        """Close SSH connection"""
        if self.client:
            self.client.close()
            self.client = None

    def execute_command(self, command: str, timeout: Optional[float] = ESXCLI_COMMAND_TIMEOUT) -> Tuple[int, str, str]:
        """
        Execute command on ESXi host

        Args:
            command: Shell command to execute
            timeout: Command timeout in seconds

        Returns:
            Tuple of (exit_code, stdout, stderr)
        """
        if not self.client:
            self.connect()

        try:
            stdin, stdout, stderr = self.client.exec_command(command, timeout=timeout)
            out = stdout.read().decode('utf-8')
            err = stderr.read().decode('utf-8')
            exit_code = stdout.channel.recv_exit_status()
        except (paramiko.SSHException, OSError) as e:
            raise RemoteCallError(f"command failed on {self.host}: {e}", host=self.host) from e
        return exit_code, out, err

    def run_esxcli(self, args: List[str], timeout: Optional[float] = ESXCLI_COMMAND_TIMEOUT) -> List[EsxcliRow]:
        """
        Run an esxcli namespace command with CSV output

        Args:
            args: esxcli arguments, e.g. ['software', 'vib', 'get', '-n', 'foo']
            timeout: Command timeout in seconds

        Returns:
            Parsed rows

        Raises:
            EsxcliFault: esxcli exited non-zero; err_msgs holds its message lines
        """
        command = shlex.join(['esxcli', '--formatter=csv'] + list(args))
        exit_code, stdout, stderr = self.execute_command(command, timeout=timeout)

        if exit_code != 0:
            err_msgs = [line.strip() for line in (stderr + '\n' + stdout).splitlines() if line.strip()]
            raise EsxcliFault(
                f"esxcli {' '.join(args)} exited {exit_code} on {self.host}",
                err_msgs=err_msgs,
                exit_code=exit_code,
                host=self.host,
            )
        return parse_csv_output(stdout)
