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
.. module:: jenkinsrest.artifact
    :platform: Unix, Windows
    :synopsis: Build artifacts and their fingerprints
'''

import hashlib
import logging
import os
from urllib.parse import quote

from jenkinsrest import endpoints
from jenkinsrest.exceptions import NotFoundException
from jenkinsrest.pollable import Pollable

logger = logging.getLogger(__name__)

MD5_CHUNK_SIZE = 1024 * 1024


def file_md5(path):
    '''Return the hex MD5 digest of the file at ``path``, ``str``.'''
    digest = hashlib.md5()
    with open(path, 'rb') as fp:
        for chunk in iter(lambda: fp.read(MD5_CHUNK_SIZE), b''):
            digest.update(chunk)
    return digest.hexdigest()


class Fingerprint(Pollable):
    '''The server record of a file, keyed by its MD5 digest.'''

    kind = 'fingerprint'

    def __init__(self, jenkins, md5, raw=None):
        base = endpoints.FINGERPRINT % {'id': endpoints.quote_segment(md5)}
        super(Fingerprint, self).__init__(jenkins, base, raw)
        self.id = md5

    def valid(self, scope=None):
        '''True if the server knows a file with this digest.'''
        try:
            self.poll(scope=scope)
        except NotFoundException:
            return False
        return self._raw.get('hash') == self.id

    def validate_for_build(self, file_name, build, scope=None):
        '''True if the digest belongs to ``file_name`` produced by ``build``.

        :param build: the :class:`jenkinsrest.build.Build` that should
            have produced the file
        '''
        if not self.valid(scope=scope):
            return False
        if self._raw.get('fileName') != file_name:
            return False
        original = self._raw.get('original') or {}
        return (original.get('number') == build.number and
                original.get('name') == build.job_name)

    def get_info(self, scope=None):
        self.poll(scope=scope)
        return self.info()


class Artifact(object):
    '''A file archived by a build.

    :param build: the :class:`jenkinsrest.build.Build` that archived it
    :param path: path relative to the build artifact root, ``str``
    :param file_name: base name of the file, ``str``
    '''

    def __init__(self, jenkins, build, path, file_name=None):
        self.jenkins = jenkins
        self.build = build
        self.path = path
        self.file_name = file_name or os.path.basename(path)
        self.base = build.base + endpoints.BUILD_ARTIFACT % {
            'path': quote(path.encode('utf-8'))}

    def __repr__(self):
        return '<Artifact %s>' % self.base

    def get_data(self, scope=None):
        '''Download the artifact, ``bytes``.'''
        _, data = self.jenkins.requester.get_raw(self.base, scope=scope,
                                                 binary=True)
        return data

    def save(self, path, scope=None):
        '''Save the artifact to ``path`` and check it against its fingerprint.

        A file already at ``path`` with a valid fingerprint is kept and
        not downloaded again.

        :returns: ``True`` if the saved file matches the server fingerprint
        '''
        if os.path.exists(path) and self._validate(path, scope):
            logger.debug('%s already saved at %s', self.base, path)
            return True
        data = self.get_data(scope=scope)
        with open(path, 'wb') as fp:
            fp.write(data)
        if not self._validate(path, scope):
            logger.warning('Fingerprint of %s does not match %s',
                           path, self.base)
            return False
        return True

    def save_to_dir(self, directory, scope=None):
        return self.save(os.path.join(directory, self.file_name),
                         scope=scope)

    def _validate(self, path, scope):
        fingerprint = Fingerprint(self.jenkins, file_md5(path))
        return fingerprint.validate_for_build(self.file_name, self.build,
                                              scope=scope)
