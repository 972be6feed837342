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
.. module:: jenkinsrest.credentials
    :platform: Unix, Windows
    :synopsis: Credentials of the system store or of a folder store

Credentials travel as ``config.xml`` documents; see
:mod:`jenkinsrest.xmlcodec` for the supported kinds.
'''

from jenkinsrest import endpoints
from jenkinsrest import xmlcodec
from jenkinsrest.exceptions import BadHTTPException
from jenkinsrest.exceptions import NotFoundException

#: the global domain
GLOBAL_DOMAIN = '_'


class CredentialsManager(object):
    '''Manage the credentials of one store.

    :param jenkins: the owning :class:`jenkinsrest.Jenkins` connection
    :param folder: full name of a folder to use its store instead of the
        system store, ``str``
    '''

    def __init__(self, jenkins, folder=None):
        self.jenkins = jenkins
        self.folder = folder

    @property
    def requester(self):
        return self.jenkins.requester

    def _store(self, domain):
        if self.folder:
            folder_url, store = endpoints.job_path(self.folder), 'folder'
        else:
            folder_url, store = '', 'system'
        return endpoints.CREDENTIALS_STORE % {
            'folder_url': folder_url,
            'store': store,
            'domain': endpoints.quote_segment(domain),
        }

    def _credential(self, credential_id, domain):
        return self._store(domain) + endpoints.CREDENTIAL % {
            'id': endpoints.quote_segment(credential_id)}

    def _post(self, endpoint, credential_id, scope, xml_body=None):
        try:
            if xml_body is None:
                response, _ = self.requester.post_form(endpoint, scope=scope)
            else:
                response, _ = self.requester.post_xml(endpoint, xml_body,
                                                      scope=scope)
        except BadHTTPException as e:
            if e.status == 404:
                raise NotFoundException('credential[%s] does not exist'
                                        % credential_id, e.status, e.body)
            raise
        return 200 <= response.status_code < 300

    def list(self, domain=GLOBAL_DOMAIN, scope=None):
        '''Return the ids of the credentials in ``domain``, ``[str]``.'''
        _, data = self.requester.get_json(self._store(domain),
                                          query={'tree': 'credentials[id]'},
                                          scope=scope)
        return [c['id'] for c in data.get('credentials', [])]

    def get(self, credential_id, domain=GLOBAL_DOMAIN, scope=None):
        '''Fetch and decode one credential.

        Secrets come back redacted or encrypted by the server.

        :returns: a credentials variant, or a ``RawVariant`` for kinds the
            codec does not know
        '''
        _, config = self.requester.get_raw(
            self._credential(credential_id, domain) + endpoints.CONFIG,
            scope=scope)
        return xmlcodec.decode_credentials(config)

    def add(self, credentials, domain=GLOBAL_DOMAIN, scope=None):
        '''Create a credential; a duplicate id raises ``ConflictException``.'''
        return self._post(self._store(domain) + endpoints.CREATE_CREDENTIAL,
                          credentials.id, scope,
                          xmlcodec.encode_credentials(credentials))

    def update(self, credential_id, credentials, domain=GLOBAL_DOMAIN,
               scope=None):
        return self._post(
            self._credential(credential_id, domain) + endpoints.CONFIG,
            credential_id, scope, xmlcodec.encode_credentials(credentials))

    def delete(self, credential_id, domain=GLOBAL_DOMAIN, scope=None):
        return self._post(
            self._credential(credential_id, domain) + endpoints.DELETE,
            credential_id, scope)
