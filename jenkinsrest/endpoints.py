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
.. module:: jenkinsrest.endpoints
    :platform: Unix, Windows
    :synopsis: Paths of the Jenkins REST endpoints

Every path starts with ``/``, never ends with ``/`` and never includes the
server root; the requester prepends the root when it builds the URL.
'''

from urllib.parse import quote, unquote, urlparse

# REST Endpoints
ROOT = '/'
CRUMB_URL = '/crumbIssuer/api/json'
API_JSON = '/api/json'
QUIET_DOWN = '/quietDown'
SAFE_RESTART = '/safeRestart'

# jobs and folders, relative to the folder or job base
CREATE_ITEM = '%(folder_url)s/createItem'
JOB = '%(folder_url)s/job/%(short_name)s'
CONFIG = '/config.xml'
DELETE = '/doDelete'
ENABLE = '/enable'
DISABLE = '/disable'
RENAME = '/doRename'
BUILD_JOB = '/build'
BUILD_WITH_PARAMS_JOB = '/buildWithParameters'
FOLDER_MODE = 'com.cloudbees.hudson.plugins.folder.Folder'

# builds, relative to the build base
BUILD = '%(job_url)s/%(number)d'
BUILD_CONSOLE_OUTPUT = '/consoleText'
BUILD_PROGRESSIVE_TEXT = '/logText/progressiveText'
BUILD_TEST_REPORT = '/testReport'
BUILD_ENV_VARS = '/injectedEnvVars'
BUILD_ARTIFACT = '/artifact/%(path)s'
STOP_BUILD = '/stop'

# pipeline (workflow API)
PIPELINE_RUNS = '/wfapi/runs'
PIPELINE_DESCRIBE = '/wfapi/describe'
PIPELINE_PENDING_INPUTS = '/wfapi/pendingInputActions'
PIPELINE_ARTIFACTS = '/wfapi/artifacts'
PIPELINE_LOG = '/wfapi/log'
PIPELINE_NODE = '/execution/node/%(id)s'

# queue
QUEUE = '/queue'
QUEUE_ITEM = '/queue/item/%(id)d'
CANCEL_QUEUE = '/queue/cancelItem'

# script console
SCRIPT_TEXT = '/scriptText'

# nodes
NODE_LIST = '/computer'
CREATE_NODE = '/computer/doCreateItem'
NODE = '/computer/%(name)s'
NODE_TYPE = 'hudson.slaves.DumbSlave$DescriptorImpl'
TOGGLE_OFFLINE = '/toggleOffline'
LAUNCH_NODE = '/launchSlaveAgent'
DISCONNECT_NODE = '/doDisconnect'
NODE_LOG = '/logText/progressiveText'
NODE_JNLP = '/slave-agent.jnlp'
LABEL = '/label/%(name)s'

# views
VIEW = '/view/%(name)s'
CREATE_VIEW = '/createView'
ADD_JOB_TO_VIEW = '/addJobToView'
REMOVE_JOB_FROM_VIEW = '/removeJobFromView'

# plugins
PLUGIN_MANAGER = '/pluginManager'
INSTALL_PLUGIN = '/pluginManager/installNecessaryPlugins'
UNINSTALL_PLUGIN = '/pluginManager/plugin/%(name)s/doUninstall'
UPLOAD_PLUGIN = '/pluginManager/uploadPlugin'

# credentials
CREDENTIALS_STORE = '%(folder_url)s/credentials/store/%(store)s/domain/%(domain)s'
CREATE_CREDENTIAL = '/createCredentials'
CREDENTIAL = '/credential/%(id)s'

# users and API tokens
CREATE_USER = '/securityRealm/createAccountByAdmin'
DELETE_USER = '/securityRealm/user/%(name)s/doDelete'
USER = '/user/%(name)s'
ALL_USERS = '/securityRealm/api/json'
API_TOKEN = '/me/descriptorByName/jenkins.security.ApiTokenProperty'
GENERATE_API_TOKEN = API_TOKEN + '/generateNewToken'
REVOKE_API_TOKEN = API_TOKEN + '/revoke'
REVOKE_ALL_API_TOKENS = API_TOKEN + '/revokeAll'

# artifacts
FINGERPRINT = '/fingerprint/%(id)s'


def quote_segment(value):
    '''URL-encode a single path segment, ``/`` included.'''
    return quote(str(value).encode('utf-8'), safe='')


def get_job_folder(name):
    '''Return the folder path and the short name of a job.

    Jobs inside folders are addressed by their full name, with ``/``
    separating the folders (ex.: 'folder/job').

    :param name: Job name, ``str``
    :returns: Tuple [ 'folder path', 'Name of job without folder path' ]
    '''
    a_path = [segment for segment in name.strip('/').split('/') if segment]
    if not a_path:
        raise ValueError('job name must not be empty')
    short_name = a_path[-1]
    folder_url = ''.join('/job/' + quote_segment(s) for s in a_path[:-1])
    return folder_url, short_name


def job_path(name):
    '''Return the base path of a job or folder, ``/job/a/job/b``.'''
    folder_url, short_name = get_job_folder(name)
    return JOB % {'folder_url': folder_url,
                  'short_name': quote_segment(short_name)}


def job_name_from_url(url):
    '''Return the full job name that a job URL points at.

    ``http://host/jenkins/job/a/job/b/`` gives ``a/b``.
    '''
    parts = urlparse(url).path.strip('/').split('/')
    names = []
    i = 0
    while i < len(parts) - 1:
        if parts[i] == 'job':
            names.append(unquote(parts[i + 1]))
            i += 2
        else:
            i += 1
    return '/'.join(names)


def path_from_url(url, root_url):
    '''Return the path of ``url`` below the server root ``root_url``.

    ``http://host/jenkins/job/a/x=1/5/`` below ``http://host/jenkins``
    gives ``/job/a/x=1/5``.
    '''
    root = urlparse(root_url).path.rstrip('/')
    path = urlparse(url).path.rstrip('/')
    if root and path.startswith(root + '/'):
        path = path[len(root):]
    return path



def queue_id_from_location(location):
    '''Extract the queue item number from a ``Location`` header.'''
    # location is a queue item, eg. "http://jenkins/queue/item/25/"
    return int(location.rstrip('/').split('/')[-1])
