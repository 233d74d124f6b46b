import os

# vCenter connection (datastore uploads and inventory walks)
VCENTER_HOST = os.getenv("VCENTER_HOST", "vcenter.example.com")
VCENTER_USER = os.getenv("VCENTER_USER", "administrator@vsphere.local")
VCENTER_PASSWORD = os.getenv("VCENTER_PASSWORD", "")
VCENTER_PORT = int(os.getenv("VCENTER_PORT", "443"))

# SSL verification
VERIFY_SSL = os.getenv("VERIFY_SSL", "false").lower() == "true"

# ESXi SSH credentials (esxcli runs over SSH)
ESXI_SSH_USER = os.getenv("ESXI_SSH_USER", "root")
ESXI_SSH_PASSWORD = os.getenv("ESXI_SSH_PASSWORD", "")
ESXI_SSH_TIMEOUT = int(os.getenv("ESXI_SSH_TIMEOUT", "30"))
ESXCLI_COMMAND_TIMEOUT = int(os.getenv("ESXCLI_COMMAND_TIMEOUT", "300"))

# Copy-offload VIB
VIB_NAME = os.getenv("VIB_NAME", "vmkfstools-wrapper")
VIB_LOCATION = os.getenv("VIB_LOCATION", "/bin/vmkfstools-wrapper.vib")

# Datastore layout on the ESXi side
DATASTORE_VOLUMES_ROOT = "/vmfs/volumes"
UPLOAD_TIMEOUT = int(os.getenv("UPLOAD_TIMEOUT", "600"))  # 10 minutes for VIB upload

# Inventory walk bound (host -> cluster -> folders -> datacenter)
DATACENTER_MAX_HOPS = int(os.getenv("DATACENTER_MAX_HOPS", "32"))
