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
.. module:: jenkinsrest
    :platform: Unix, Windows
    :synopsis: Python API to interact with Jenkins over its REST API
    :noindex:

A :class:`Jenkins` connection hands out entities (jobs, builds, nodes,
views, ...) that keep the JSON snapshot of their last :meth:`poll`.
Every method that talks to the server takes an optional ``scope``, a
:class:`Scope` that can cancel the call or bound it with a deadline.
'''

import logging
import xml.etree.ElementTree as ET

from jenkinsrest import endpoints
from jenkinsrest import users
from jenkinsrest.artifact import Artifact
from jenkinsrest.artifact import Fingerprint
from jenkinsrest.build import Build
from jenkinsrest.build import MatrixRun
from jenkinsrest.cloud import CloudConfig
from jenkinsrest.cloud import KubernetesCloud
from jenkinsrest.credentials import CredentialsManager
from jenkinsrest.exceptions import AuthenticationException
from jenkinsrest.exceptions import AuthorizationException
from jenkinsrest.exceptions import BadHTTPException
from jenkinsrest.exceptions import CancelledException
from jenkinsrest.exceptions import ConflictException
from jenkinsrest.exceptions import DecodeException
from jenkinsrest.exceptions import EmptyResponseException
from jenkinsrest.exceptions import JenkinsException
from jenkinsrest.exceptions import NotFoundException
from jenkinsrest.exceptions import ProtocolException
from jenkinsrest.exceptions import TimeoutException
from jenkinsrest.exceptions import TransportException
from jenkinsrest.exceptions import XMLCodecException
from jenkinsrest.job import Folder
from jenkinsrest.job import Job
from jenkinsrest.node import Label
from jenkinsrest.node import Node
from jenkinsrest.node import node_name
from jenkinsrest.plugins import Plugins
from jenkinsrest.pollable import Pollable
from jenkinsrest.queue import Queue
from jenkinsrest.queue import Task
from jenkinsrest.requester import Requester
from jenkinsrest.scope import Scope
from jenkinsrest.users import APIToken
from jenkinsrest.users import User
from jenkinsrest.view import LIST_VIEW
from jenkinsrest.view import View

# Set default logging handler to avoid "No handler found" warnings.
logging.getLogger(__name__).addHandler(logging.NullHandler())

logger = logging.getLogger(__name__)

__all__ = [
    'APIToken', 'Artifact', 'AuthenticationException',
    'AuthorizationException', 'BadHTTPException', 'Build',
    'CancelledException', 'CloudConfig', 'ConflictException',
    'CredentialsManager', 'DecodeException', 'EmptyResponseException',
    'Fingerprint', 'Folder', 'Jenkins', 'JenkinsException', 'Job',
    'KubernetesCloud', 'Label', 'MatrixRun', 'Node',
    'NotFoundException', 'Plugins', 'ProtocolException', 'Queue',
    'Requester', 'Scope', 'Task', 'TimeoutException', 'TransportException',
    'User', 'View', 'XMLCodecException',
]


class Jenkins(Pollable):
    '''Connection to a Jenkins server.

    The connection is itself the entity of the server root: :meth:`poll`
    refreshes the root snapshot (jobs, views, mode, ...).

    All methods will raise :class:`JenkinsException` on failure.
    '''

    kind = 'server'

    CREATED = 'created'
    CONNECTING = 'connecting'
    READY = 'ready'
    CLOSED = 'closed'

    def __init__(self, url, username=None, password=None, timeout=None,
                 ssl_verify=True):
        '''Create handle to Jenkins instance.

        No request is made until :meth:`connect` or the first operation.

        :param url: URL of Jenkins server, ``str``
        :param username: Server username, ``str``
        :param password: Server password or API token, ``str``
        :param timeout: Server connection timeout in secs (default: not set), ``int``
        :param ssl_verify: Verify the server TLS certificate, ``bool``
        '''
        super(Jenkins, self).__init__(self, endpoints.ROOT)
        self.server = url.rstrip('/')
        self.version = None
        self.state = self.CREATED
        self._requester = Requester(url, username, password, timeout=timeout,
                                    ssl_verify=ssl_verify)

    @property
    def requester(self):
        if self.state == self.CLOSED:
            raise TransportException('Connection to server[%s] is closed'
                                     % self.server)
        return self._requester

    def connect(self, scope=None):
        '''Fetch the server version and the root snapshot.

        The state is ``CONNECTING`` while the request is in flight and goes
        back to the previous state when it fails.

        :returns: the connection itself
        '''
        requester = self.requester
        previous, self.state = self.state, self.CONNECTING
        try:
            response, data = requester.get_json(endpoints.ROOT, scope=scope)
        except Exception:
            self.state = previous
            raise
        self.version = response.headers.get('X-Jenkins')
        if self.version is None:
            logger.warning('server[%s] did not send an X-Jenkins header',
                           self.server)
        self._raw = data
        self.state = self.READY
        return self

    def close(self):
        '''Dispose of the HTTP session; the connection cannot be reused.'''
        if self.state != self.CLOSED:
            self._requester.close()
            self.state = self.CLOSED

    def __enter__(self):
        return self.connect()

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def __repr__(self):
        return '<Jenkins %s>' % self.server

    def get_version(self, scope=None):
        '''Get the version of this Master.

        :returns: This master's version number ``str``
        '''
        if self.state != self.READY:
            self.connect(scope=scope)
        return self.version

    # jobs

    def get_job(self, name, scope=None):
        '''Return the job ``name`` (ex.: 'folder/job'), polled.'''
        job = Job(self, name)
        job.poll(scope=scope)
        return job

    def get_folder(self, name, scope=None):
        folder = Folder(self, name)
        folder.poll(scope=scope)
        return folder

    def create_job(self, name, config_xml, scope=None):
        '''Create a new Jenkins job

        :param name: Name of Jenkins job, ``str``
        :param config_xml: config file text, ``str``
        :returns: the new :class:`Job`, polled
        '''
        return Job(self, name).create(config_xml, scope=scope)

    def create_job_in_folder(self, folder, name, config_xml, scope=None):
        return self.create_job('%s/%s' % (folder.strip('/'), name),
                               config_xml, scope=scope)

    def create_folder(self, name, scope=None):
        return Folder(self, name).create(scope=scope)

    def rename_job(self, name, new_name, scope=None):
        '''Rename an existing Jenkins job

        Moving a job between folders is not supported, ``new_name`` is the
        new short name.

        :returns: the renamed :class:`Job`, polled
        '''
        job = Job(self, name)
        job.rename(new_name, scope=scope)
        job.poll(scope=scope)
        return job

    def copy_job(self, from_name, to_name, scope=None):
        return Job(self, from_name).copy(to_name, scope=scope)

    def delete_job(self, name, scope=None):
        return Job(self, name).delete(scope=scope)

    def build_job(self, name, parameters=None, token=None, files=None,
                  scope=None):
        '''Trigger build job.

        :param name: name of job
        :param parameters: parameters for job, or ``None``, ``dict``
        :param token: Jenkins API token
        :param files: paths of files for file parameters, ``list``
        :returns: ``int`` queue item
        '''
        return Job(self, name).invoke(parameters, token=token, files=files,
                                      scope=scope)

    def get_build(self, job_name, number, scope=None):
        build = Build(self, job_name, number)
        build.poll(scope=scope)
        return build

    def get_all_builds(self, job_name, scope=None):
        '''Return every build of a job, unpolled, ``[Build]``.'''
        ids = Job(self, job_name).get_all_build_ids(scope=scope)
        return [Build(self, job_name, entry['number']) for entry in ids]

    def get_all_jobs(self, folder_depth=None, scope=None):
        '''Get list of all jobs recursively to the given folder depth.

        Each entry is a :class:`Job` (a :class:`Folder` for entries with
        children) whose snapshot is the listing entry only.

        :param folder_depth: Number of levels to search, ``int``. By default
            None, which will search all levels. 0 limits to toplevel.
        :returns: list of jobs, ``[Job]``
        '''
        jobs_list = []
        _, data = self.requester.get_json(
            endpoints.ROOT, query={'tree': 'jobs[name,url,color]'},
            scope=scope)
        jobs = [(0, [], data.get('jobs', []))]
        for lvl, root, lvl_jobs in jobs:
            for job in lvl_jobs:
                path = root + [job['name']]
                fullname = '/'.join(path)
                if 'color' not in job:  # folder
                    jobs_list.append(Folder(self, fullname, job))
                    if folder_depth is None or lvl < folder_depth:
                        _, children = self.requester.get_json(
                            endpoints.job_path(fullname),
                            query={'tree': 'jobs[name,url,color]'},
                            scope=scope)
                        jobs.append((lvl + 1, path,
                                     children.get('jobs') or []))
                else:
                    jobs_list.append(Job(self, fullname, job))
        return jobs_list

    def get_job_names(self, folder_depth=None, scope=None):
        '''Return the full names of all jobs and folders, ``[str]``.'''
        return [job.name for job in self.get_all_jobs(folder_depth, scope)]

    # nodes and labels

    def get_node(self, name, scope=None):
        node = Node(self, name)
        node.poll(scope=scope)
        return node

    def get_all_nodes(self, scope=None):
        '''Return the nodes of the server with their listing snapshot.'''
        _, data = self.requester.get_json(endpoints.NODE_LIST, scope=scope)
        return [Node(self, node_name(computer), computer)
                for computer in data.get('computer', [])]

    def create_node(self, name, num_executors=1, description='',
                    remote_fs='/var/lib/jenkins', label='', exclusive=False,
                    launcher=None, properties=None, scope=None):
        '''Create a permanent agent, see :meth:`jenkinsrest.node.Node.create`.

        :returns: the new :class:`Node`, polled
        '''
        return Node(self, name).create(
            num_executors=num_executors, description=description,
            remote_fs=remote_fs, label=label, exclusive=exclusive,
            launcher=launcher, properties=properties, scope=scope)

    def delete_node(self, name, scope=None):
        return Node(self, name).delete(scope=scope)

    def get_label(self, name, scope=None):
        label = Label(self, name)
        label.poll(scope=scope)
        return label

    # clouds

    def configure_kubernetes_cloud(self, cloud_name, namespace='default',
                                   jenkins_url='', jenkins_tunnel='',
                                   operation='add', scope=None):
        '''Add, update or delete a Kubernetes cloud.

        :param operation: ``add``, ``update`` or ``delete``, ``str``
        :returns: the :class:`KubernetesCloud`, with the script output
        '''
        config = CloudConfig(cloud_name, namespace, jenkins_url,
                             jenkins_tunnel, operation)
        return KubernetesCloud(self, config).configure(scope=scope)

    # queue

    def get_queue(self, scope=None):
        queue = Queue(self)
        queue.poll(scope=scope)
        return queue

    def get_queue_item(self, number, scope=None):
        task = Task(self, number)
        task.poll(scope=scope)
        return task

    def cancel_queue_item(self, number, scope=None):
        return Task(self, number).cancel(scope=scope)

    # views

    def get_view(self, name, scope=None):
        view = View(self, name)
        view.poll(scope=scope)
        return view

    def get_all_views(self, scope=None):
        '''Return the views of the root snapshot, unpolled, ``[View]``.'''
        _, data = self.requester.get_json(
            endpoints.ROOT, query={'tree': 'views[name,url]'}, scope=scope)
        return [View(self, view['name'], view)
                for view in data.get('views', [])]

    def create_view(self, name, view_type=LIST_VIEW, scope=None):
        return View(self, name).create(view_type, scope=scope)

    # plugins

    def get_plugins(self, depth=1, scope=None):
        '''Return the installed plugins, polled, ``Plugins``.'''
        plugins = Plugins(self, depth=depth)
        plugins.poll(scope=scope)
        return plugins

    def has_plugin(self, name, scope=None):
        return self.get_plugins(scope=scope).contains(name) is not None

    def install_plugin(self, name, version='latest', scope=None):
        '''Ask the server to install a plugin and its dependencies.

        The installation runs in the background on the server.

        :param name: short name of the plugin, ``str``
        :param version: plugin version, ``str``
        '''
        root = ET.Element('jenkins')
        ET.SubElement(root, 'install', plugin='%s@%s' % (name, version))
        response, _ = self.requester.post_xml(endpoints.INSTALL_PLUGIN, root,
                                              scope=scope)
        return 200 <= response.status_code < 300

    def uninstall_plugin(self, name, scope=None):
        endpoint = endpoints.UNINSTALL_PLUGIN % {
            'name': endpoints.quote_segment(name)}
        response, _ = self.requester.post_form(endpoint, scope=scope)
        return 200 <= response.status_code < 300

    def upload_plugin(self, path, scope=None):
        '''Upload a ``.hpi``/``.jpi`` file from ``path``.'''
        response, _ = self.requester.post_files(endpoints.UPLOAD_PLUGIN,
                                                files=[path], scope=scope)
        return 200 <= response.status_code < 300

    # artifacts

    def get_artifact_data(self, job_name, number, path, scope=None):
        '''Download artifact ``path`` of a build, ``bytes``.'''
        build = Build(self, job_name, number)
        return Artifact(self, build, path).get_data(scope=scope)

    def validate_fingerprint(self, md5, scope=None):
        return Fingerprint(self, md5).valid(scope=scope)

    # users and API tokens

    def create_user(self, name, password, full_name, email, scope=None):
        return users.create_user(self, name, password, full_name, email,
                                 scope=scope)

    def delete_user(self, name, scope=None):
        return users.delete_user(self, name, scope=scope)

    def get_user(self, name, scope=None):
        user = User(self, name)
        user.poll(scope=scope)
        return user

    def get_all_users(self, scope=None):
        return users.get_all_users(self, scope=scope)

    def generate_api_token(self, name, scope=None):
        return users.generate_api_token(self, name, scope=scope)

    def revoke_api_token(self, uuid, scope=None):
        return users.revoke_api_token(self, uuid, scope=scope)

    def revoke_all_api_tokens(self, scope=None):
        return users.revoke_all_api_tokens(self, scope=scope)

    # server

    def quiet_down(self, scope=None):
        '''Prepare Jenkins for shutdown.

        No new builds will be started allowing running builds to complete
        prior to shutdown of the server.
        '''
        response, _ = self.requester.post_form(endpoints.QUIET_DOWN,
                                               scope=scope)
        return 200 <= response.status_code < 300

    def safe_restart(self, scope=None):
        '''Restart the server once running builds complete.'''
        response, _ = self.requester.post_form(endpoints.SAFE_RESTART,
                                               scope=scope)
        return 200 <= response.status_code < 300

    def credentials(self, folder=None):
        '''Return the manager of the system or of a folder credentials store.'''
        return CredentialsManager(self, folder)
