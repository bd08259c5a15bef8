"""
Model file manager.

Attach named file collections to any Django model:

    from model_file_manager.mixins import HasFiles

    class Invoice(HasFiles, models.Model):
        files = models.JSONField(null=True, blank=True)

    invoice.upload_file(request.FILES['scan'], 'documents')
    invoice.get_first_file_from_collection('documents')
"""
