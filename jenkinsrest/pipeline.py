#!/usr/bin/env python
# Software License Agreement (BSD License)
#
# Copyright (c) 2010, Willow Garage, Inc.
# All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions
# are met:
#
#  * Redistributions of source code must retain the above copyright
#    notice, this list of conditions and the following disclaimer.
#  * Redistributions in binary form must reproduce the above
#    copyright notice, this list of conditions and the following
#    disclaimer in the documentation and/or other materials provided
#    with the distribution.
#  * Neither the name of Willow Garage, Inc. nor the names of its
#    contributors may be used to endorse or promote products derived
#    from this software without specific prior written permission.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS
# 'AS IS' AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT
# LIMITED TO, THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS
# FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE
# COPYRIGHT OWNER OR CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT,
# INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING,
# BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES;
# LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER
# CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT
# LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN
# ANY WAY OUT OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE
# POSSIBILITY OF SUCH DAMAGE.

'''
.. module:: jenkinsrest.pipeline
    :platform: Unix, Windows
    :synopsis: Pipeline runs and stages from the Workflow API (wfapi)
'''

from jenkinsrest import endpoints
from jenkinsrest.pollable import Pollable


class PipelineNode(Pollable):
    '''A stage or step of a pipeline run.'''

    kind = 'pipeline node'

    def __init__(self, run, raw):
        self.run = run
        self.id = str(raw.get('id'))
        base = run.base + endpoints.PIPELINE_NODE % {'id': self.id}
        super(PipelineNode, self).__init__(run.jenkins, base, raw)

    def _poll_endpoint(self):
        return self.base + endpoints.PIPELINE_DESCRIBE

    def get_name(self):
        return self._get('name', '')

    def get_status(self):
        return self._get('status', '')

    def get_duration(self):
        return self._get('durationMillis', 0)

    def get_stage_flow_nodes(self):
        return [PipelineNode(self.run, node)
                for node in self._get('stageFlowNodes', [])]

    def get_log(self, scope=None):
        '''Return the log of the node, ``dict`` with a ``text`` key.'''
        _, data = self.requester.get_json(self.base + endpoints.PIPELINE_LOG,
                                          scope=scope)
        return data


class PipelineRun(Pollable):
    '''One run of a pipeline job, as described by ``wfapi/describe``.'''

    kind = 'pipeline run'

    def __init__(self, job, raw):
        self.job = job
        self.id = str(raw.get('id'))
        super(PipelineRun, self).__init__(job.jenkins,
                                          '%s/%s' % (job.base, self.id), raw)

    def _poll_endpoint(self):
        return self.base + endpoints.PIPELINE_DESCRIBE

    def get_name(self):
        return self._get('name', '')

    def get_status(self):
        return self._get('status', '')

    def get_start_time(self):
        return self._get('startTimeMillis', 0)

    def get_duration(self):
        return self._get('durationMillis', 0)

    def get_stages(self):
        return [PipelineNode(self, stage) for stage in self._get('stages', [])]

    def get_pending_input_actions(self, scope=None):
        '''Inputs the run is waiting for, ``[dict]``.'''
        _, data = self.requester.get_json(
            self.base + endpoints.PIPELINE_PENDING_INPUTS, scope=scope)
        return data or []

    def get_artifacts(self, scope=None):
        _, data = self.requester.get_json(
            self.base + endpoints.PIPELINE_ARTIFACTS, scope=scope)
        return data or []

    def get_node(self, node_id, scope=None):
        '''Return stage or step ``node_id`` of the run, polled.'''
        node = PipelineNode(self, {'id': node_id})
        node.poll(scope=scope)
        return node
