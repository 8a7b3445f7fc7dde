# Pulse Field Mapping
# Airtable column names for each logical attribute, per table
#
# Bases have drifted over time (English/Serbian names, renamed columns), so
# each attribute lists its candidate column names in order of preference.
# A FieldMap is bound once against the columns a batch actually has, then
# used to read every record in that batch.


class FieldMap:
    """Mapping from logical attribute names to candidate Airtable columns."""

    def __init__(self, candidates, defaults=None):
        self.candidates = {attr: tuple(names) for attr, names in candidates.items()}
        self.defaults = defaults or {}

    def bind(self, records_or_fields):
        """Resolve each attribute to one column name.

        Accepts a list of Airtable records, a list of field dicts, or a
        single field dict. Airtable omits empty cells per record, so the
        columns seen across the whole batch are considered. When none of an
        attribute's candidates is present, the first candidate is used.
        """
        if isinstance(records_or_fields, dict):
            records_or_fields = [records_or_fields]

        seen = set()
        for item in records_or_fields:
            fields = item['fields'] if 'fields' in item else item
            seen.update(fields.keys())

        resolved = {}
        for attr, names in self.candidates.items():
            resolved[attr] = next((name for name in names if name in seen), names[0])
        return BoundFieldMap(resolved, self.defaults)

    def column(self, attr):
        """Preferred column name for an attribute"""
        return self.candidates[attr][0]


class BoundFieldMap:
    """A FieldMap resolved against a concrete set of columns."""

    def __init__(self, resolved, defaults):
        self.resolved = resolved
        self.defaults = defaults

    def column(self, attr):
        return self.resolved[attr]

    def get(self, fields, attr, default=None):
        if default is None:
            default = self.defaults.get(attr)
        value = fields.get(self.resolved[attr])
        if value is None or value == '' or value == []:
            return default
        return value

    def read(self, fields):
        """Read every mapped attribute from a record's fields"""
        return {attr: self.get(fields, attr) for attr in self.resolved}

    def to_columns(self, values):
        """Translate {attr: value} into {column: value} for writes.

        Unknown attributes are skipped. None is kept so a cell can be cleared.
        """
        return {
            self.resolved[attr]: value
            for attr, value in values.items()
            if attr in self.resolved
        }


CLIENT_FIELDS = FieldMap({
    'name': ('Name', 'Client Name', 'Company', 'Ime', 'Client name'),
    'logo': ('Logo',)
}, defaults={'name': 'Unknown'})

CONTRACT_MONTH_FIELDS = FieldMap({
    'month': ('Month',),
    'client': ('Client',),
    'percentDelivered': ('%Delivered', '% Delivered', 'Percent Delivered'),
    'startDate': ('Start Date', 'StartDate', 'Start'),
    'endDate': ('End Date', 'EndDate', 'End'),
    'goal': ('Goal', 'Views Goal', 'Target', 'Campaign Goal (Views)'),
    'delivered': ('Number of Views Achieved', 'Views Achieved', 'Views',
                  'Total Views for a Contract Month'),
    'likes': ('Number of Likes Achieved',),
    'comments': ('Number of Comment Achieved',),
    'shares': ('Number of Shares Achieved',),
    'publishedClips': ('Published Clips', 'Number of Published Clips'),
    'contractStatus': ('Contract Status',),
    'progressStatus': ('Progress Status',),
    'influencers': ('Influencers',)
}, defaults={
    'month': 'Unknown',
    'percentDelivered': 0,
    'goal': 0,
    'delivered': 0,
    'likes': 0,
    'comments': 0,
    'shares': 0,
    'publishedClips': 0,
    'contractStatus': '',
    'progressStatus': '',
    'influencers': []
})

INFLUENCER_FIELDS = FieldMap({
    'name': ('Influencer Name', 'Name'),
    'photo': ('Influencer_Image', 'Photo', 'Image'),
    'tiktokHandle': ('TikTok Handle', 'TikTok', 'TikTok Username'),
    'instagramHandle': ('Instagram Handle', 'Instagram', 'Instagram Username'),
    'phone': ('Phone', 'Telefon', 'Phone Number'),
    'email': ('Email', 'E-mail', 'Email Address'),
    'city': ('City', 'Grad', 'Location'),
    'shirtSize': ('Shirt Size', 'Veličina majice', 'T-Shirt Size'),
    'pantsSize': ('Pants Size', 'Veličina pantalona', 'Pants'),
    'shoeSize': ('Shoe Size', 'Broj cipela', 'Shoes'),
    'categories': ('Categories', 'Kategorije', 'Niches'),
    'bio': ('Bio', 'About', 'Description'),
    'status': ('Status',)
}, defaults={
    'name': 'Unknown',
    'tiktokHandle': '',
    'instagramHandle': '',
    'phone': '',
    'email': '',
    'city': '',
    'shirtSize': '',
    'pantsSize': '',
    'shoeSize': '',
    'categories': [],
    'bio': '',
    'status': 'Active'
})

# Profile attributes an influencer may edit themselves
EDITABLE_PROFILE_FIELDS = (
    'phone', 'city', 'tiktokHandle', 'instagramHandle', 'shirtSize',
    'pantsSize', 'shoeSize', 'categories', 'bio', 'email'
)

INFLUENCER_CLIP_FIELDS = FieldMap({
    'clipId': ('Clip ID',),
    'clientName': ('Client Name (from Contract Months)', 'Client Name', 'Client'),
    'platform': ('Social', 'Platform'),
    'link': ('Social Media link', 'Link'),
    'publishDate': ('Publish Date',),
    'views': ('Total Views', 'Views'),
    'likes': ('Likes',),
    'comments': ('Comments',),
    'shares': ('Share', 'Shares'),
    'saves': ('Saves',),
    'status': ('Status',),
    'payment': ('Payment', 'Honorar'),
    'paymentStatus': ('Payment Status',)
}, defaults={
    'clipId': '',
    'clientName': 'Unknown',
    'platform': 'TikTok',
    'link': '#',
    'views': 0,
    'likes': 0,
    'comments': 0,
    'shares': 0,
    'saves': 0,
    'status': 'Published',
    'payment': 0,
    'paymentStatus': 'Pending'
})

OFFER_FIELDS = FieldMap({
    'clientName': ('Client Name', 'Klijent'),
    'niche': ('Niche', 'Kategorija'),
    'platform': ('Platform',),
    'payment': ('Payment', 'Honorar'),
    'viewsRequired': ('Views Required', 'Potrebni views'),
    'deadline': ('Deadline', 'Rok'),
    'description': ('Description', 'Opis'),
    'status': ('Status',)
}, defaults={
    'clientName': '',
    'niche': '',
    'platform': 'TikTok',
    'payment': 0,
    'viewsRequired': 0,
    'description': '',
    'status': 'Open'
})

APPLICATION_FIELDS = FieldMap({
    'clientName': ('Client Name', 'Offer Name'),
    'status': ('Status',),
    'dateApplied': ('Date Applied', 'Created'),
    'note': ('Note', 'Poruka')
}, defaults={'clientName': 'Unknown', 'status': 'Pending', 'note': ''})

SHIPMENT_FIELDS = FieldMap({
    'name': ('Name',),
    'influencer': ('Influencer',),
    'influencerName': ('Influencer Name', 'Influencer (from Influencer)'),
    'contractMonth': ('Contract Month',),
    'contractMonthName': ('Contract Month Name', 'Month (from Contract Month)'),
    'coordinator': ('Coordinator',),
    'coordinatorName': ('Coordinator Name', 'Name (from Coordinator)'),
    'status': ('Status',),
    'items': ('Items',),
    'trackingNumber': ('Tracking Number',),
    'courier': ('Courier',),
    'sentDate': ('Sent Date',),
    'deliveredDate': ('Delivered Date',),
    'notes': ('Notes',),
    'createdAt': ('Created',)
}, defaults={
    'name': '',
    'influencerName': '',
    'contractMonthName': '',
    'coordinatorName': '',
    'status': 'Čeka slanje',
    'items': '',
    'trackingNumber': '',
    'courier': '',
    'notes': ''
})
