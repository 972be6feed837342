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
.. module:: jenkinsrest.cloud
    :platform: Unix, Windows
    :synopsis: Kubernetes cloud configuration through the script console

The kubernetes plugin has no REST endpoint for its clouds, so the cloud is
added, replaced or removed by a Groovy script posted to ``/scriptText``.
'''

import collections
import logging
import string

from jenkinsrest import endpoints
from jenkinsrest.exceptions import BadHTTPException

logger = logging.getLogger(__name__)

ADD = 'add'
UPDATE = 'update'
DELETE = 'delete'

OPERATIONS = (ADD, UPDATE, DELETE)

#: settings of a cloud, ``operation`` is one of :data:`OPERATIONS`
CloudConfig = collections.namedtuple(
    'CloudConfig',
    'cloud_name namespace jenkins_url jenkins_tunnel operation')

MANAGE_CLOUDS_SCRIPT = string.Template('''\
import jenkins.model.Jenkins
import org.csanchez.jenkins.plugins.kubernetes.KubernetesCloud

def jenkins = Jenkins.get()
def name = '${cloud_name}'
def operation = '${operation}'
def existing = jenkins.clouds.getByName(name)

if (operation == 'add' && existing != null) {
    throw new IllegalStateException('cloud ' + name + ' already exists')
}
if (operation != 'add' && existing == null) {
    throw new IllegalStateException('cloud ' + name + ' does not exist')
}
if (existing != null) {
    jenkins.clouds.remove(existing)
}
if (operation != 'delete') {
    def cloud = new KubernetesCloud(name)
    cloud.setNamespace('${namespace}')
    cloud.setJenkinsUrl('${jenkins_url}')
    cloud.setJenkinsTunnel('${jenkins_tunnel}')
    jenkins.clouds.add(cloud)
}
jenkins.save()
println(operation + ' ' + name)
''')


def _groovy_literal(value):
    '''Escape ``value`` for a single-quoted Groovy string.'''
    return (value or '').replace('\\', '\\\\').replace("'", "\\'").replace(
        '\n', '\\n').replace('$', '\\$')


class KubernetesCloud(object):
    '''A Kubernetes cloud of the server.

    :param jenkins: the owning :class:`jenkinsrest.Jenkins` connection
    :param config: settings of the cloud, :class:`CloudConfig`
    '''

    def __init__(self, jenkins, config):
        if config.operation not in OPERATIONS:
            raise ValueError('unknown cloud operation %s' % config.operation)
        self.jenkins = jenkins
        self.config = config
        self.base = endpoints.SCRIPT_TEXT
        #: text printed by the last script run, ``str``
        self.output = None

    def __repr__(self):
        return '<KubernetesCloud %s>' % self.config.cloud_name

    def render_script(self):
        '''Return the Groovy script applying the configuration, ``str``.

        Each call renders a fresh script; nothing is shared between clouds.
        '''
        values = dict((field, _groovy_literal(value))
                      for field, value in self.config._asdict().items())
        return MANAGE_CLOUDS_SCRIPT.substitute(values)

    def configure(self, scope=None):
        '''Run the script on the server.

        :returns: the cloud itself
        :raises BadHTTPException: when the server does not answer 200
        '''
        script = self.render_script()
        logger.debug('Applying %s of cloud[%s] on server[%s]',
                     self.config.operation, self.config.cloud_name,
                     self.jenkins.server)
        response, _ = self.jenkins.requester.post_form(
            self.base, {'script': script}, scope=scope)
        if response.status_code != 200:
            raise BadHTTPException(
                'Configuring cloud[%s] failed with status %d'
                % (self.config.cloud_name, response.status_code),
                status=response.status_code)
        self.output = response.text
        return self
