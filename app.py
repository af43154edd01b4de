#!/usr/bin/env python3
import aws_cdk as cdk

from lab_files.lab_files_stack import LabFilesStack


app = cdk.App()
LabFilesStack(app, "LabFilesStack")

app.synth()
