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
.. module:: jenkinsrest.node
    :platform: Unix, Windows
    :synopsis: Nodes (agents, computers, slaves) and labels
'''

import json
import logging

from jenkinsrest import endpoints
from jenkinsrest import xmlcodec
from jenkinsrest.exceptions import BadHTTPException
from jenkinsrest.exceptions import NotFoundException
from jenkinsrest.exceptions import ProtocolException
from jenkinsrest.pollable import Pollable

logger = logging.getLogger(__name__)

#: name of the built-in node in label listings
BUILT_IN_NODE = '(built-in)'

#: classes of the built-in node's computer, old and new names
BUILT_IN_CLASSES = ('hudson.model.Hudson$MasterComputer',
                    'jenkins.model.Jenkins$MasterComputer')


def node_name(computer):
    '''Return the name a computer listing entry is addressed by.

    The built-in node is listed under a localized display name
    ("master", "Built-In Node") but only answers at ``/computer/(built-in)``.
    '''
    if computer.get('_class') in BUILT_IN_CLASSES:
        return BUILT_IN_NODE
    return computer['displayName']


class Node(Pollable):
    '''A node, addressed by its name.'''

    kind = 'node'

    def __init__(self, jenkins, name, raw=None):
        base = endpoints.NODE % {'name': endpoints.quote_segment(name)}
        super(Node, self).__init__(jenkins, base, raw)
        self.name = name

    def get_name(self):
        return self._get('displayName', self.name)

    def is_online(self):
        return not self._get('offline', False)

    def is_temporarily_offline(self):
        return bool(self._get('temporarilyOffline', False))

    def is_idle(self):
        return bool(self._get('idle', False))

    def is_jnlp_agent(self):
        return bool(self._get('jnlpAgent', False))

    def get_offline_reason(self):
        return self._get('offlineCauseReason', '')

    def create(self, num_executors=1, description='',
               remote_fs='/var/lib/jenkins', label='', exclusive=False,
               launcher=None, properties=None, scope=None):
        '''Create a permanent agent named after this node.

        :param num_executors: number of executors for node, ``int``
        :param description: Description of node, ``str``
        :param remote_fs: Remote filesystem location to use, ``str``
        :param label: Labels to associate with node, ``str``
        :param exclusive: Use this node for tied jobs only, ``bool``
        :param launcher: launcher variant, defaults to an inbound (JNLP)
            agent, see :mod:`jenkinsrest.xmlcodec`
        :param properties: node property variants, written to the node
            ``config.xml`` once it exists, ``list``
        :returns: this node, polled
        '''
        if launcher is None:
            launcher = xmlcodec.default_jnlp_launcher()
        inner_params = {
            'name': self.name,
            'nodeDescription': description,
            'numExecutors': num_executors,
            'remoteFS': remote_fs,
            'labelString': label,
            'mode': 'EXCLUSIVE' if exclusive else 'NORMAL',
            'type': endpoints.NODE_TYPE,
            'retentionStrategy': {
                'stapler-class': xmlcodec.RETENTION_ALWAYS,
            },
            'nodeProperties': {'stapler-class-bag': 'true'},
            'launcher': launcher.to_json(),
        }
        params = {
            'name': self.name,
            'type': endpoints.NODE_TYPE,
            'json': json.dumps(inner_params),
        }
        self.requester.post_form(endpoints.CREATE_NODE, params, scope=scope)

        if properties:
            config = self.get_config(scope=scope)
            config.node_properties = list(properties)
            self.update_config(config, scope=scope)
        self.poll(scope=scope)
        return self

    def delete(self, scope=None):
        return self._post(endpoints.DELETE, scope=scope)

    def toggle_temporarily_offline(self, message='', scope=None):
        return self._post(endpoints.TOGGLE_OFFLINE,
                          query={'offlineMessage': message}, scope=scope)

    def set_online(self, scope=None):
        '''Bring the node back online, relaunching it if it is disconnected.'''
        self.poll(scope=scope)
        if self.is_temporarily_offline():
            return self.toggle_temporarily_offline(scope=scope)
        if not self.is_online():
            return self.launch_node_by_ssh(scope=scope)
        return True

    def set_offline(self, message='', scope=None):
        '''Mark the node temporarily offline unless it already is offline.'''
        self.poll(scope=scope)
        if self.is_online():
            return self.toggle_temporarily_offline(message, scope=scope)
        return True

    def launch_node_by_ssh(self, scope=None):
        return self._post(endpoints.LAUNCH_NODE, scope=scope)

    def disconnect(self, message='', scope=None):
        return self._post(endpoints.DISCONNECT_NODE,
                          form={'offlineMessage': message}, scope=scope)

    def get_log_text(self, start=0, scope=None):
        '''Return the agent log from offset ``start``, ``str``.'''
        _, text = self.requester.get_raw(self.base + endpoints.NODE_LOG,
                                         query={'start': start}, scope=scope)
        return text

    def get_config_xml(self, scope=None):
        _, config = self.requester.get_raw(self.base + endpoints.CONFIG,
                                           scope=scope)
        return config

    def get_config(self, scope=None):
        '''Return the decoded node configuration, ``NodeConfig``.'''
        return xmlcodec.NodeConfig.from_xml(self.get_config_xml(scope=scope))

    def update_config(self, config, scope=None):
        '''Replace the node configuration.

        :param config: ``NodeConfig`` or an XML document, ``str``
        '''
        if isinstance(config, xmlcodec.NodeConfig):
            config = config.to_element()
        try:
            response, _ = self.requester.post_xml(
                self.base + endpoints.CONFIG, config, scope=scope)
        except BadHTTPException as e:
            if e.status == 404:
                raise NotFoundException('node[%s] does not exist' % self.name,
                                        e.status, e.body)
            raise
        return 200 <= response.status_code < 300

    def get_launcher_config(self, scope=None):
        return self.get_config(scope=scope).launcher

    def get_jnlp_secret(self, scope=None):
        '''Return the secret an inbound agent uses to connect, ``str``.'''
        _, root = self.requester.get_xml(self.base + endpoints.NODE_JNLP,
                                         scope=scope)
        argument = root.find('.//application-desc/argument')
        if argument is None or not argument.text:
            raise ProtocolException('No agent secret found for node[%s]'
                                    % self.name)
        return argument.text.strip()


class Label(Pollable):
    '''A label and the nodes carrying it.'''

    kind = 'label'

    def __init__(self, jenkins, name, raw=None):
        base = endpoints.LABEL % {'name': endpoints.quote_segment(name)}
        super(Label, self).__init__(jenkins, base, raw)
        self.name = name

    def get_name(self):
        return self._get('name', self.name)

    def get_node_names(self):
        return [node.get('nodeName') or BUILT_IN_NODE
                for node in self._get('nodes', [])]

    def get_nodes(self):
        '''Return the unpolled :class:`Node` objects with this label.'''
        return [Node(self.jenkins, name) for name in self.get_node_names()]
