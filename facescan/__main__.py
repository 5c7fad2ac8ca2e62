# SPDX-License-Identifier: Apache-2.0
from facescan.cli import app

app()
